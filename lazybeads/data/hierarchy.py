"""Parent/child relationships encoded in dotted issue identifiers.

"bd-abc" is a root, "bd-abc.1" is its first child and "bd-abc.1.2" a
grandchild. Nothing about the hierarchy is stored; it is always derived from
the identifier string.
"""


def parent_id(issue_id: str) -> str:
    """Return the parent identifier, or "" for a root.

    "bd-abc.1" -> "bd-abc", "bd-abc.1.2" -> "bd-abc.1", "bd-abc" -> "".
    """
    head, sep, _ = issue_id.rpartition(".")
    return head if sep else ""


def depth(issue_id: str) -> int:
    """Return the nesting level: the number of dots in the identifier."""
    return issue_id.count(".")


def is_direct_child_of(child_id: str, parent: str) -> bool:
    """Return True if child_id is an immediate child of parent.

    "bd-abc.1.2" is a grandchild of "bd-abc", not a direct child.
    """
    prefix = parent + "."
    if not child_id.startswith(prefix):
        return False
    return "." not in child_id[len(prefix):]
