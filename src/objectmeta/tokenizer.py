"""
Property path tokenizer.

A path such as ``orders[0].items[2].price`` is consumed one segment at a
time. Each segment is immutable; the rest of the path is tokenized lazily
when the caller advances.

    >>> seg = tokenize("orders[0].items")
    >>> seg.name, seg.index, seg.indexed_name, seg.children
    ('orders', '0', 'orders[0]', 'items')
    >>> seg.next().name
    'items'
"""

from dataclasses import dataclass
from typing import Iterator, Optional


@dataclass(frozen=True)
class PathSegment:
    """One segment of a property path."""
    name: str
    indexed_name: str
    index: Optional[str] = None
    children: Optional[str] = None

    @property
    def full_path(self) -> str:
        """This segment and everything after it, as written."""
        if self.children is None:
            return self.indexed_name
        return f"{self.indexed_name}.{self.children}"

    def has_next(self) -> bool:
        return self.children is not None

    def next(self) -> 'PathSegment':
        """Tokenize the remainder of the path."""
        if self.children is None:
            raise ValueError(f"'{self.indexed_name}' is the last segment of its path")
        return tokenize(self.children)

    def __iter__(self) -> Iterator['PathSegment']:
        segment = self
        while True:
            yield segment
            if segment.children is None:
                return
            segment = tokenize(segment.children)


def tokenize(path: str) -> PathSegment:
    """Split the first segment off ``path``."""
    head, dot, rest = path.partition('.')
    children = rest if dot else None

    name = head
    index = None
    bracket = head.find('[')
    if bracket > -1:
        index = head[bracket + 1:-1] if head.endswith(']') else head[bracket + 1:]
        name = head[:bracket]

    return PathSegment(name=name, indexed_name=head, index=index, children=children)
