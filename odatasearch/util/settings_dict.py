from typing import Callable, Mapping, Optional, Union

from .inspect import pluck_kwargs_from


class ODataQuerySettingsDict(dict):
    """ ODataQuery settings container.

        Is only used for nice autocompletion and documentation purposes only! :)

        The keyword settings in this object are just plain kwargs names
        for every handler object's __init__ method,
        which are fed to subclasses of ODataQueryHandlerBase by QuerySettingsHandler.

        In addition to that, there are '<handler-name>_enabled' settings,
        that can enable or disable a handler.

        A special key, `entity_sets`, lets you override settings for queries that return a particular entity set:

            entity_sets={'Books': dict(max_top=10)}
    """

    def __init__(self,
                 # --- path
                 type_field: Optional[str] = None,
                 # --- filter
                 strict_filter: bool = False,
                 force_filter: Union[dict, Callable, None] = None,
                 # --- filter & orderby
                 keyword_suffix: str = '.keyword',
                 # --- limit
                 default_top: int = 25,
                 max_top: Optional[int] = None,
                 # --- enabled handlers?
                 filter_enabled: bool = True,
                 select_enabled: bool = True,
                 expand_enabled: bool = True,
                 orderby_enabled: bool = True,
                 top_enabled: bool = True,
                 count_enabled: bool = True,
                 # --- Entity sets
                 entity_sets: Optional[Mapping[str, dict]] = None,
                 ):
        """ `ODataQuery` has a few settings that let you configure the way search requests are made.

        These settings can be kept in an ODataQuerySettingsDict and given to ODataQuery as the second argument.
        Example:
            ```python
            from odatasearch import ODataQuery, ODataQuerySettingsDict
            oq = ODataQuery(schema, ODataQuerySettingsDict(
                type_field='join_field',
                max_top=100,
                # Only published books are visible
                entity_sets=dict(
                    Books=dict(force_filter={'term': {'published': True}}),
                ),
            ))
            ```

        Args:
            type_field (str | None): (for: path)
                Name of the join field that holds the document type.
                When set, every search is restricted to the documents of the requested type.
                Use it when documents of different types share one index (which is the case with parent/child joins).
            strict_filter (bool): (for: filter)
                When a filter can't be compiled (unknown property, unsupported function), reject the request.
                By default, such a filter is ignored, and a warning is logged.
            force_filter (dict | Callable): (for: filter)
                A search engine query that is ANDed to every request.
                Can be a `lambda entity_set: dict`.
            keyword_suffix (str): (for: filter, orderby)
                The exact-match sub-field suffix used with `keyword` properties.
            default_top (int): (for: top)
                The number of entities returned when `$top` is not given.
            max_top (int | None): (for: top)
                The maximum number of entities that a single request can return.
            filter_enabled (bool): Is the $filter query option enabled?
            select_enabled (bool): Is the $select query option enabled?
            expand_enabled (bool): Is the $expand query option enabled?
            orderby_enabled (bool): Is the $orderby query option enabled?
            top_enabled (bool): Are the $top and $skip query options enabled?
            count_enabled (bool): Is the $count query option enabled?
            entity_sets (dict[str, dict]): Settings overrides for particular entity sets, by entity set name.
        """
        super(ODataQuerySettingsDict, self).__init__()
        self.update({k: v
                     for k, v in locals().items()
                     if k not in {'__class__', 'self'}})

    def and_more(self, **settings):
        """ Copy the object and add more settings to it """
        return self.__class__(**{**self, **settings})

    @classmethod
    def pluck_from(cls, dict: Mapping) -> 'ODataQuerySettingsDict':
        """ Initialize from a dict, ignoring the keys this settings dict does not know """
        kwargs = pluck_kwargs_from(dict, for_func=cls.__init__)
        return cls(**kwargs)
