"""
### Count

`$count=true` asks for the total number of matching entities, together with the entities themselves:

```
GET /Books?$count=true&$top=10
```

The response will have `@odata.count` set to the total, while `value` has only the first 10 books.
The search engine counts matches anyway; we only have to ask it to count them precisely.
"""

from .base import ODataQueryHandlerBase
from ..exc import InvalidQueryError


class CountHandler(ODataQueryHandlerBase):
    """ $count

        Just give it:
        * count=True
    """

    query_option_name = 'count'

    def __init__(self, entity_set, schema):
        super(CountHandler, self).__init__(entity_set, schema)

        # On input
        self.count = None

    def input(self, count=None):
        super(CountHandler, self).input(count)
        if not isinstance(count, (int, bool, NoneType)):
            raise InvalidQueryError('$count must be either true or false')

        # Done
        self.count = bool(count)
        return self

    def alter_request(self, request):
        if self.count:
            request.track_total_hits = True
        return request


NoneType = type(None)
