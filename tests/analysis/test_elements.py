"""Tests for element and behavior doc extraction."""

from __future__ import annotations

from pathlib import Path

from repobot.analysis.elements import BEHAVIOR, ELEMENT, ElementAnalyzer
from tests._fixtures.repo_builder import RepoBuilder


def test_element_documented_by_preceding_doc_comment() -> None:
    source = """
<script>
  /**
   * A button that is
   * rather fancy.
   *
   * @demo demo/index.html
   */
  Polymer({
    is: 'fancy-button'
  });
</script>
"""
    (symbol,) = ElementAnalyzer().analyze_source(source, Path("fancy-button.html"))

    assert symbol.kind == ELEMENT
    assert symbol.name == "fancy-button"
    assert symbol.description == "A button that is\nrather fancy."


def test_element_falls_back_to_dom_module_comment() -> None:
    source = """
<!--
Shows an icon.
-->
<dom-module id="iron-icon">
  <script>
    Polymer({is: "iron-icon"});
  </script>
</dom-module>
"""
    (symbol,) = ElementAnalyzer().analyze_source(source, Path("iron-icon.html"))

    assert symbol.description == "Shows an icon."


def test_code_between_comment_and_declaration_breaks_the_link() -> None:
    source = """
/** Not about the element. */
var helper = 1;
Polymer({is: 'x-undocumented'});
"""
    (symbol,) = ElementAnalyzer().analyze_source(source, Path("x-undocumented.html"))

    assert symbol.description == ""


def test_behavior_named_by_tag_or_assignment() -> None:
    source = """
<script>
  /**
   * Tagged behavior.
   * @polymerBehavior Polymer.IronA11yKeysBehavior
   */
  Polymer.IronA11yKeysBehavior = {};

  /**
   * Behavior named by its assignment.
   * @polymerBehavior
   */
  Polymer.IronControlState = {};
</script>
"""
    symbols = ElementAnalyzer().analyze_source(source, Path("behaviors.html"))

    assert [(symbol.kind, symbol.name) for symbol in symbols] == [
        (BEHAVIOR, "Polymer.IronA11yKeysBehavior"),
        (BEHAVIOR, "Polymer.IronControlState"),
    ]
    assert symbols[1].description == "Behavior named by its assignment."


def test_analyze_scans_top_level_html_and_indexes_by_directory(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        "paper-button",
        {
            "paper-button.html": "<script>Polymer({is: 'paper-button'});</script>",
            "index.html": "<script>Polymer({is: 'ignored-index'});</script>",
            "demo/demo-element.html": "<script>Polymer({is: 'demo-element'});</script>",
            "test/basic.html": "<script>Polymer({is: 'test-element'});</script>",
        },
    )
    repo_builder.write("iron-icon", {"iron-icon.html": "<script>Polymer({is: 'iron-icon'});</script>"})

    index = repo_builder.analyze("paper-button", "iron-icon")

    assert len(index) == 2
    assert [symbol.name for symbol in index.elements_in(repo_builder.path("paper-button"))] == ["paper-button"]
    assert [symbol.name for symbol in index.elements_in(repo_builder.path("iron-icon"))] == ["iron-icon"]
    assert index.behaviors_in(repo_builder.path("iron-icon")) == []
