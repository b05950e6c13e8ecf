"""
### Expand

`$expand` names the navigation properties the client wants expanded:

```
GET /Books?$expand=author
```

Related entities live in other documents, and are not loaded: one request is one search call.
The names are validated, and the serializer stops writing navigation links for them.
"""

from .base import ODataQueryHandlerBase
from ..exc import InvalidQueryError, InvalidNavigationError


class ExpandHandler(ODataQueryHandlerBase):
    """ $expand

        Input: a list of navigation property names, or None
    """

    query_option_name = 'expand'

    def __init__(self, entity_set, schema):
        super(ExpandHandler, self).__init__(entity_set, schema)

        # On input
        self.expand = None

    def input(self, names):
        super(ExpandHandler, self).input(names)

        if names is None:
            names = []
        if isinstance(names, str):
            names = [n.strip() for n in names.split(',') if n.strip()]
        if not isinstance(names, (list, tuple)) or not all(isinstance(n, str) for n in names):
            raise InvalidQueryError('$expand must be a list of navigation property names')

        # Validate
        for name in names:
            if self.entity_type.get_navigation_property(name) is None:
                raise InvalidNavigationError(self.entity_type.name, name, self.query_option_name)

        self.expand = list(dict.fromkeys(names))
        return self

    def alter_request(self, request):
        return request  # nothing to load
