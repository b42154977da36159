"""Adds the standard GitHub issue template."""

from __future__ import annotations

from ..models import RepositorySnapshot
from .base import CleanupPass
from .util import make_commit, read_text

ISSUE_TEMPLATE = """## Description
<!-- Example: The `paper-foo` element causes the page to turn pink when clicked. -->

## Expected outcome

<!-- Example: The page stays the same color. -->

## Actual outcome

<!-- Example: The page turns pink. -->

## Steps to reproduce

<!-- Example
1. Put a `paper-foo` element in the page.
2. Open the page in a web browser.
3. Click the `paper-foo` element.
-->

## Browsers Affected
<!-- Check all that apply -->
- [ ] Chrome
- [ ] Firefox
- [ ] Safari 9
- [ ] Safari 8
- [ ] Safari 7
- [ ] Edge
- [ ] IE 11
- [ ] IE 10
"""


class IssueTemplatePass(CleanupPass):
    name = "issue-template"
    runs_by_default = False
    description = "Write .github/ISSUE_TEMPLATE.md"

    async def apply(self, snapshot: RepositorySnapshot) -> None:
        expected = self.render(snapshot)
        template_path = snapshot.directory / ".github" / "ISSUE_TEMPLATE.md"
        if read_text(template_path) == expected:
            return
        template_path.parent.mkdir(exist_ok=True)
        template_path.write_text(expected, encoding="utf-8")
        await make_commit(snapshot, [".github/ISSUE_TEMPLATE.md"], "[ci skip] Update Issue Template")

    @staticmethod
    def render(snapshot: RepositorySnapshot) -> str:
        short_name = snapshot.descriptor.full_name
        instructions = (
            f"<!-- Instructions: https://github.com/{short_name}/CONTRIBUTING.md#filing-issues -->"
        )
        return f"{instructions}\n{ISSUE_TEMPLATE}"
