"""
### Order By

`$orderby` corresponds to the `sort` of a search request.

```
GET /Books?$orderby=year desc,title
```

Every item is a property, and an optional direction: `asc` (default) or `desc`.
Only plain properties can be sorted by; items that are not a property reference are ignored.

The sort refers to properties by their declared names.
It is compiled against the backing document fields; text properties marked as `keyword` are sorted
by their exact-match sub-field.
"""

from .base import ODataQueryHandlerBase
from ..pagination import Sort, ASC, DESC
from ..uri import Member


class OrderByHandler(ODataQueryHandlerBase):
    """ $orderby

        Input: a list of `odatasearch.uri.OrderByItem`, or None
    """

    query_option_name = 'orderby'

    def __init__(self, entity_set, schema, keyword_suffix='.keyword'):
        super(OrderByHandler, self).__init__(entity_set, schema)

        # Settings
        self.keyword_suffix = keyword_suffix

        # On input
        #: List of Sort objects
        self.sort = None

    def input(self, items):
        super(OrderByHandler, self).input(items)

        # Only single-segment members can be sorted by
        sort = [
            Sort(item.expression.path[0], DESC if item.descending else ASC)
            for item in (items or ())
            if isinstance(item.expression, Member) and len(item.expression.path) == 1
        ]

        # Validate
        self.validate_properties([s.property for s in sort])

        # Done
        self.sort = sort
        return self

    def compile_sort(self):
        """ Compile the sort for the search engine

        :return: [{field: 'asc' | 'desc'}, ...]
        :rtype: list[dict]
        """
        sort = []
        for s in self.sort or ():
            prop = self.entity_type.get_property(s.property)
            field = prop.field + self.keyword_suffix if self.schema.needs_keyword(prop) else prop.field
            sort.append({field: s.direction})
        return sort

    def alter_request(self, request):
        request.sort = self.compile_sort() or None
        return request

    def get_final_input_value(self):
        return ['{} {}'.format(s.property, s.direction) for s in self.sort]
