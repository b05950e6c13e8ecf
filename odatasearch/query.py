from . import handlers
from .exc import InvalidQueryError
from .pagination import Pagination
from .search import SearchRequest
from .util import QuerySettingsHandler


class ODataQuery:
    """ OData-style queries over a search engine index

        The resource path is resolved first: it tells which entity set the response is made of.
        Then, every query option is given to its handler, and handlers build a single SearchRequest.

        An ODataQuery is single-use: create one for every request.
    """

    def __init__(self, schema, handler_settings=None):
        """ Init an OData query

        :param schema: The Entity Data Model
        :type schema: odatasearch.schema.EntityDataModel
        :param handler_settings: Settings for query option handlers.
            These are just plain kwargs names for every handler object's __init__ method.
            Note that you don't have to specify which object receives which kwarg:
            the `QuerySettingsHandler` object does that automatically.

            To disable a query option, give its name mapped to a `False`:

                count_enabled=False

            The list of all settings:
                # path
                    type_field=None
                # filter
                    strict_filter=False
                    force_filter=None
                # filter & orderby
                    keyword_suffix='.keyword'
                # top
                    default_top=25
                    max_top=None
                # enabled handlers?
                    filter_enabled=True
                    select_enabled=True
                    expand_enabled=True
                    orderby_enabled=True
                    top_enabled=True
                    count_enabled=True
                # Overrides for particular entity sets
                    entity_sets={'Books': dict(max_top=10)}

        :type handler_settings: dict | ODataQuerySettingsDict | None
        """
        self._schema = schema

        # Initialize the settings
        self._handler_settings = self._init_handler_settings(handler_settings or {})

        # The path handler is the only one that works before we know the entity set
        self.handler_path = self._init_handler(self._handler_settings, 'path', self._QO_HANDLER_PATH, None)

        # Initialized by query(), when the entity set is known
        self._entity_set_settings = None  # type: QuerySettingsHandler

    # region Query Option handlers

    #: Query Option handler classes
    _QO_HANDLER_PATH = handlers.ResourcePathHandler
    _QO_HANDLER_FILTER = handlers.FilterHandler
    _QO_HANDLER_SELECT = handlers.SelectHandler
    _QO_HANDLER_EXPAND = handlers.ExpandHandler
    _QO_HANDLER_ORDERBY = handlers.OrderByHandler
    _QO_HANDLER_TOP = handlers.LimitHandler
    _QO_HANDLER_COUNT = handlers.CountHandler

    #: Names of query option handlers, except for 'path'
    HANDLER_NAMES = ('filter', 'select', 'expand', 'orderby', 'top', 'count')

    # for IDE completion
    handler_path = None  # type: handlers.ResourcePathHandler
    handler_filter = None  # type: handlers.FilterHandler
    handler_select = None  # type: handlers.SelectHandler
    handler_expand = None  # type: handlers.ExpandHandler
    handler_orderby = None  # type: handlers.OrderByHandler
    handler_top = None  # type: handlers.LimitHandler
    handler_count = None  # type: handlers.CountHandler

    def _handlers(self):
        """ Get the list of all (handler_name, handler) but 'path' """
        return [(name, getattr(self, 'handler_' + name))
                for name in self.HANDLER_NAMES]

    def _init_query_option_handlers(self, entity_set):
        """ Initialize every query option handler for the entity set """
        settings = self._entity_set_settings = self._handler_settings.for_entity_set(entity_set.name)

        for name in self.HANDLER_NAMES:
            handler_cls = getattr(self, '_QO_HANDLER_' + name.upper())
            setattr(self, 'handler_' + name,
                    self._init_handler(settings, name, handler_cls, entity_set))

        # Check settings
        settings.raise_if_invalid_handler_settings(self)

    def _init_handler(self, settings, handler_name, handler_cls, entity_set):
        """ Init a handler, and load its settings """
        handler_settings = settings.get_settings(handler_name, handler_cls)
        return handler_cls(entity_set, self._schema, **handler_settings)

    def _init_handler_settings(self, handler_settings):
        """ Initialize: handler settings """
        hso = QuerySettingsHandler(handler_settings)
        hso.validate_entity_set_settings(self._schema)

        # Analyze every handler's kwargs, so that typos are reported right away
        for name in ('path',) + self.HANDLER_NAMES:
            hso.get_settings(name, getattr(self, '_QO_HANDLER_' + name.upper()))
        hso.raise_if_invalid_handler_settings(self)

        # Done
        return hso

    # endregion

    def query(self, path, **query_options):
        """ Build a search request from the resource path and query options

        :param path: The resource path: a list of `odatasearch.uri.UriResource`
        :param filter: Filter expression: `odatasearch.uri.Expression`
        :param select: List of property names
        :param expand: List of navigation property names
        :param orderby: List of `odatasearch.uri.OrderByItem`
        :param top: The number of entities to return
        :param skip: The number of entities to skip
        :param count: Count the matching entities?
        :raises InvalidQueryError: unknown query options provided
        :raises InvalidPropertyError: invalid property name provided in the input
        :raises UnsupportedRequestError: the resource path can't be handled
        :raises NotFoundError: unknown entity set
        :raises DisabledError: input for a disabled query option
        :rtype: ODataQuery
        """
        # Resolve the path: now we know the entity set
        self.handler_path.with_odataquery(self)
        self.handler_path.input(path)
        self._init_query_option_handlers(self.handler_path.entity_set)

        # Prepare query options
        for handler_name, handler in self._handlers():
            query_options = handler.input_prepare_query_options(query_options)

        # Check if query option names are all right
        invalid_keys = set(query_options.keys()) - set(self.HANDLER_NAMES)
        if invalid_keys:
            raise InvalidQueryError('Unknown query options: {}'.format(', '.join(sorted(invalid_keys))))

        # Bind every handler with ourselves
        for handler_name, handler in self._handlers():
            handler.with_odataquery(self)

        # Process every query option with its handler
        # Every handler should be invoked because they may have defaults even when no input was provided
        for handler_name, handler in self._handlers():
            input_value = query_options.get(handler_name, None)

            # Disabled handlers exception
            # But only test that if there actually was any input
            if input_value is not None:
                self._entity_set_settings.raise_if_not_handler_enabled(self.handler_path.entity_set.name,
                                                                       handler_name)

            handler.input(input_value)

        # Done
        return self

    def end(self) -> SearchRequest:
        """ Get the resulting search request

        :rtype: odatasearch.search.SearchRequest
        """
        request = self.handler_path.alter_request(SearchRequest())

        # Apply every handler
        for handler_name, handler in self._handlers():
            request = handler.alter_request(request)

        return request

    # region Extra features

    @property
    def entity_set(self):
        """ The entity set the response is made of

            :rtype: odatasearch.schema.EdmEntitySet
        """
        return self.handler_path.entity_set

    def get_pagination(self) -> Pagination:
        """ Get the resolved $top, $skip, and $orderby """
        return Pagination(top=self.handler_top.top,
                          skip=self.handler_top.skip,
                          orderby=self.handler_orderby.sort)

    def get_select_list(self):
        """ Get the names of the selected properties, in order; empty means "all"

            :rtype: list[str]
        """
        return self.handler_select.get_select_list()

    def get_expand_list(self):
        """ Get the names of the navigation properties to expand

            :rtype: list[str]
        """
        return self.handler_expand.expand

    def result_is_scalar(self) -> bool:
        """ Test whether the result is a single primitive value, like with `/Books('1')/title` """
        return self.handler_path.is_primitive

    def result_is_single_entity(self) -> bool:
        """ Test whether the result is a single entity, like with `/Books('1')` """
        return self.handler_path.is_single_entity

    def result_is_counted(self) -> bool:
        """ Test whether the total count was requested """
        return bool(self.handler_count.count)

    # endregion

    def __repr__(self):
        entity_set = self.handler_path.entity_set if self.handler_path is not None else None
        return 'ODataQuery({})'.format(entity_set.name if entity_set is not None else '?')
