""" Pagination: which window of the result set to return, and in which order """

from typing import Tuple

#: The number of entities returned when `$top` is not given
TOP_DEFAULT = 25

#: The number of entities skipped when `$skip` is not given
SKIP_DEFAULT = 0

ASC = 'asc'
DESC = 'desc'


class Sort:
    """ Sort by a property: its declared name, and the direction """

    __slots__ = ('property', 'direction')

    def __init__(self, property: str, direction: str = ASC):
        assert direction in (ASC, DESC)
        self.property = property
        self.direction = direction

    @property
    def descending(self) -> bool:
        return self.direction == DESC

    def __eq__(self, other):
        return isinstance(other, Sort) and (self.property, self.direction) == (other.property, other.direction)

    def __repr__(self):
        return 'Sort({!r}, {!r})'.format(self.property, self.direction)


class Pagination:
    """ The resolved $top, $skip, and $orderby """

    __slots__ = ('top', 'skip', 'orderby')

    def __init__(self, top: int = TOP_DEFAULT, skip: int = SKIP_DEFAULT, orderby: Tuple[Sort, ...] = ()):
        self.top = top
        self.skip = skip
        self.orderby = tuple(orderby)

    def __eq__(self, other):
        return isinstance(other, Pagination) and \
               (self.top, self.skip, self.orderby) == (other.top, other.skip, other.orderby)

    def __repr__(self):
        return 'Pagination(top={}, skip={}, orderby={!r})'.format(self.top, self.skip, list(self.orderby))
