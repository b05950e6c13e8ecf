"""
### Select

`$select` tells which properties to return:

```
GET /Books?$select=title,year
```

Only the selected properties are fetched from the search engine.
The select list is echoed in the context URL, in the order it was given.

When there's no `$select`, all fields are fetched; except for the `/Books('1')/title` kind of path,
where only the addressed property is fetched.
"""

from .base import ODataQueryHandlerBase
from ..exc import InvalidQueryError


class SelectHandler(ODataQueryHandlerBase):
    """ $select

        Input: a list of property names, or None
    """

    query_option_name = 'select'

    def __init__(self, entity_set, schema):
        super(SelectHandler, self).__init__(entity_set, schema)

        # On input
        #: List of property names, in the order the user has given them
        self.select = None

    def input(self, names):
        super(SelectHandler, self).input(names)

        if names is None:
            names = []
        if isinstance(names, str):
            names = [n.strip() for n in names.split(',') if n.strip()]
        if not isinstance(names, (list, tuple)) or not all(isinstance(n, str) for n in names):
            raise InvalidQueryError('$select must be a list of property names')

        # '*' selects everything
        if '*' in names:
            names = []

        # Validate
        self.validate_properties(names)

        # Unique, but keep the order
        self.select = list(dict.fromkeys(names))
        return self

    def get_select_list(self):
        """ Get the list of selected property names

            When nothing is selected, but the path addresses a property, it's the only one selected.

            :rtype: list[str]
        """
        if self.select:
            return self.select

        path_property = self.odataquery.handler_path.property if self.odataquery else None
        if path_property is not None:
            return [path_property.name]

        return []

    def compile_fields(self):
        """ Get the list of document fields to fetch; None means "all"

        :rtype: list[str] | None
        """
        names = self.get_select_list()
        if not names:
            return None
        return [self.entity_type.get_property(name).field for name in names]

    def alter_request(self, request):
        request.source = self.compile_fields()
        return request

    def get_final_input_value(self):
        return self.select
