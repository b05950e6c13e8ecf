from .inspect import pluck_kwargs_from
from ..exc import DisabledError


class QuerySettingsHandler:
    """ Settings keeper for ODataQuery

        This is essentially a helper which will feed the correct kwargs to every handler.

        Query option handlers receive settings as kwargs to their __init__() methods,
        and those kwargs have unique names.

        This class will collect all settings as a single, flat dict,
        and give each handler only the settings it wants.
        Handlers that share a setting (e.g. `keyword_suffix` for filter and orderby) will both receive it.
    """

    def __init__(self, settings: dict):
        """ Store the settings for every handler

            :param settings: dict of handler kwargs
        """
        assert isinstance(settings, dict)

        #: Settings dict
        self._settings = settings  # we don't make a copy, because we don't modify it

        #: Handler names
        self._handler_names = set()

        #: kwarg names for every handler: dict[handler] = set()
        self._handler_kwargs_names = {}

        #: all kwargs names (to identify invalid ones)
        self._all_known_kwargs_names = set()

        #: disabled handler names
        self._disabled_handlers = set()

        #: Settings overrides, per entity set name
        self._entity_set_settings = self._settings.get('entity_sets', None) or {}

    def validate_entity_set_settings(self, schema):
        """ Validate the settings overrides: keys must be entity set names

            :type schema: odatasearch.schema.EntityDataModel
            :raises KeyError: Invalid keys
        """
        invalid_keys = set(self._entity_set_settings.keys()) - set(schema.entity_sets.keys())
        if invalid_keys:
            raise KeyError('Invalid entity set name provided to "entity_sets": {!r}'
                           .format(sorted(invalid_keys)))

    def for_entity_set(self, entity_set_name: str) -> 'QuerySettingsHandler':
        """ Get a settings handler for queries that return the given entity set

            The overrides from `entity_sets` are applied on top of the common settings.
        """
        overrides = self._entity_set_settings.get(entity_set_name, None)
        if not overrides:
            return self

        settings = dict(self._settings)
        settings.update(overrides)
        hso = self.__class__(settings)

        # Same handlers, same kwargs
        hso._handler_names.update(self._handler_names)
        hso._all_known_kwargs_names.update(self._all_known_kwargs_names)
        return hso

    def get_settings(self, handler_name: str, handler_cls: type) -> dict:
        """ Get settings for the given handler

            Every time a class is given to us, we analyze its __init__() method in order to know its kwargs
            and their default values.
            Then, we take the matching keys from the settings dict, take defaults from the argument defaults,
            and make it all into `kwargs` that will be given to the class.

            In addition to that, if the settings contain `<handler_name>_enabled=False`, then it means it's disabled.
            is_handler_enabled() method will later tell that to ODataQuery.
        """
        # See if it's actually disabled
        if not self._settings.get('{}_enabled'.format(handler_name), True):
            self._disabled_handlers.add(handler_name)

        # Analyze a function, pluck the arguments that it needs
        kwargs = pluck_kwargs_from(self._settings, for_func=handler_cls.__init__)
        kwargs_names = kwargs.keys()  # always all of them

        # Store the data that we'll need
        self._handler_kwargs_names[handler_name] = set(kwargs_names)
        self._handler_names.add(handler_name)
        self._all_known_kwargs_names.update(kwargs_names)

        # Done
        return kwargs  # for the handler's __init__()

    def is_handler_enabled(self, handler_name: str) -> bool:
        """ Test if the handler is enabled in the configuration """
        return handler_name not in self._disabled_handlers

    def raise_if_not_handler_enabled(self, entity_set_name: str, handler_name: str):
        """ Raise an error if the handler is not enabled """
        if not self.is_handler_enabled(handler_name):
            raise DisabledError('Query option "${}" is disabled for "{}"'
                                .format(handler_name, entity_set_name))

    def raise_if_invalid_handler_settings(self, odataquery):
        """ Check whether there were any typos in setting names

            After all handlers were initialized, we've had a chance to analyze all their keyword arguments.
            Now, we have the information about them, and we can check whether every kwarg was actually used.
            If not, there must be a typo.

            :raises: KeyError: Invalid settings provided
        """
        # Known keys
        handler_names = set('{}_enabled'.format(handler_name)
                            for handler_name in self._handler_names)
        valid_kwargs = set(self._all_known_kwargs_names)
        other_known_keys = {'entity_sets'}
        all_known_keys = handler_names | valid_kwargs | other_known_keys

        # Result: unknown keys
        invalid_keys = set(self._settings.keys()) - all_known_keys

        # Raise?
        if invalid_keys:
            raise KeyError('Invalid settings were provided for {!r}: {}'
                           .format(odataquery, ','.join(sorted(invalid_keys))))

    def __repr__(self):
        return '{}({!r})'.format(self.__class__.__name__, self._settings)
