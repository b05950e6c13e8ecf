"""
### Top & Skip

`$top` and `$skip` correspond to the `size` and `from` of a search request.

* `$top` limits the number of entities returned. Default: 25
* `$skip` shifts the window a number of entities. Default: 0

Together, these two implement pagination:

```
GET /Books?$top=10&$skip=20     the third page of 10 books
```
"""

from .base import ODataQueryHandlerBase
from ..exc import InvalidQueryError
from ..pagination import TOP_DEFAULT, SKIP_DEFAULT


class LimitHandler(ODataQueryHandlerBase):
    """ $top and $skip

        Handles two query options:
        * 'top': None, or int
        * 'skip': None, or int
    """

    query_option_name = 'top'

    def __init__(self, entity_set, schema, default_top=TOP_DEFAULT, max_top=None):
        """ Init a limit

        :param entity_set: The entity set
        :param schema: The Entity Data Model
        :param default_top: The number of entities to return when `$top` is not given
        :param max_top: The maximum number of entities that can be loaded with one request.
            The user can never go any higher than that.
        """
        super(LimitHandler, self).__init__(entity_set, schema)

        # Config
        self.default_top = default_top
        self.max_top = max_top
        assert self.default_top > 0
        assert self.max_top is None or self.max_top > 0

        # On input
        self.top = None
        self.skip = None

    def input_prepare_query_options(self, query_options):
        """ Alter query options

        Unlike other handlers, this one receives 2 values: 'skip' and 'top'.
        ODataQuery only supports one key per handler.
        Solution: pack them as a tuple
        """
        if 'skip' in query_options or 'top' in query_options:
            query_options['top'] = (query_options.pop('skip', None),
                                    query_options.pop('top', None))
            if query_options['top'] == (None, None):
                query_options.pop('top')  # remove it if it's actually empty
        return query_options

    def input(self, skip=None, top=None):
        # ODataQuery actually gives us a tuple (skip, top)
        if isinstance(skip, tuple):
            skip, top = skip

        # Super
        super(LimitHandler, self).input((skip, top))

        # Validate
        for name, value in (('$skip', skip), ('$top', top)):
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidQueryError('{} must be an integer'.format(name))
            if value < 0:
                raise InvalidQueryError('{} must not be negative'.format(name))

        # Defaults
        top = self.default_top if top is None else top
        skip = SKIP_DEFAULT if skip is None else skip

        # Max
        if self.max_top:
            top = min(self.max_top, top)

        # Done
        self.skip = skip
        self.top = top
        return self

    def is_input_empty(self):
        return self.input_value in (None, (None, None))

    def alter_request(self, request):
        request.size = self.top
        request.from_ = self.skip
        return request
