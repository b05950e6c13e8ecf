from ..exc import InvalidPropertyError


class ODataQueryHandlerBase:
    """ An implementation of a query option handler for ODataQuery

        Every subclass will handle a single query option ($filter, $orderby, ...)
    """

    #: Name of the query option that this object is capable of handling
    query_option_name = None

    def __init__(self, entity_set, schema):
        """ Initialize the query option handler with an entity set.

        This method does *not* receive any input data just yet, with the purpose of having an
        object that can be configured with some interesting defaults right at init time.

        :param entity_set: The entity set the query is made to
        :type entity_set: odatasearch.schema.EdmEntitySet
        :param schema: The Entity Data Model
        :type schema: odatasearch.schema.EntityDataModel

        NOTE: Any arguments that have default values will be treated as handler settings!!
        """
        #: The entity set to handle the query option for
        self.entity_set = entity_set
        #: The Entity Data Model: because we need to look properties up
        self.schema = schema

        # Has the input() method been called already?
        # This may be important for handlers that depend on other handlers
        self.input_received = False
        self.input_value = None

        #: ODataQuery bound to this object. It may remain uninitialized.
        self.odataquery = None

    @property
    def entity_type(self):
        """ The entity type of the entity set

        :rtype: odatasearch.schema.EdmEntityType
        """
        return self.entity_set.entity_type

    def with_odataquery(self, odataquery):
        """ Bind this object with an ODataQuery

            :type odataquery: odatasearch.query.ODataQuery
            """
        self.odataquery = odataquery
        return self

    def __copy__(self):
        """ Handlers can be copied: their state before input() is called """
        cls = self.__class__
        result = cls.__new__(cls)
        result.__dict__.update(self.__dict__)
        return result

    def validate_properties(self, prop_names, where=None):
        """ Validate the given list of property names against the entity type

        :param prop_names: List of property names
        :raises InvalidPropertyError
        """
        invalid = self.entity_type.get_invalid_names(prop_names)
        if invalid:
            raise InvalidPropertyError(self.entity_type.name,
                                       sorted(invalid)[0],
                                       where or self.query_option_name)

    def input_prepare_query_options(self, query_options):
        """ Modify the query options before they are processed.

        Sometimes a handler would need to alter them.
        Here's its chance.

        This method is called before any input(), or validation, or anything.

        :param query_options: dict
        """
        return query_options

    def input(self, value):
        """ Get the value of the query option.

        The purpose of this method is to receive the input, validate it, and store as a public
        property so that external tools may export its value.

        :param value: the value of the query option it's handling
        :rtype: ODataQueryHandlerBase
        :raises InvalidPropertyError
        :raises InvalidQueryError
        """
        self.input_value = value  # no copying. Try not to modify it.

        # Set the flag
        self.input_received = True

        # Make sure that input() can only be used once
        self.input = self.__raise_input_not_reusable

        return self

    def is_input_empty(self):
        """ Test whether the input value was empty """
        return not self.input_value

    def __raise_input_not_reusable(self, *args, **kwargs):
        raise RuntimeError("You can't use the {}.input() method twice. "
                           "copy() the handler before it receives input!"
                           .format(self.__class__.__name__))

    def alter_request(self, request):
        """ Alter the given search request and apply the query option this handler is handling

        :param request: The search request to apply the query option to
        :type request: odatasearch.search.SearchRequest
        :rtype: odatasearch.search.SearchRequest
        """
        raise NotImplementedError()

    def get_final_input_value(self):
        """ Get the final input of the handler """
        return self.input_value
