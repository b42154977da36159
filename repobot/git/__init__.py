"""Git and pull-request plumbing."""
