class BaseODataSearchException(Exception):
    """ Base for every error raised by odatasearch

        Every error carries an HTTP status code that the transport layer may use as-is.
    """

    #: HTTP status code for the response
    status_code = 500


class InvalidQueryError(BaseODataSearchException):
    """ Invalid input provided by the User """

    status_code = 400

    def __init__(self, err: str):
        super(InvalidQueryError, self).__init__('Query error: {err}'.format(err=err))


class InvalidValueError(InvalidQueryError):
    """ A value can't be used the way the query uses it (e.g. an id compared with null) """


class InvalidPropertyError(InvalidQueryError):
    """ Query mentioned an invalid property name """

    def __init__(self, entity_type: str, property_name: str, where: str):
        self.entity_type = entity_type
        self.property_name = property_name
        self.where = where

        super(InvalidQueryError, self).__init__(
            'Invalid property "{property_name}" for "{entity_type}" specified in {where}'.format(
                property_name=property_name,
                entity_type=entity_type,
                where=where)
        )


class InvalidNavigationError(InvalidPropertyError):
    """ Query mentioned an invalid navigation property name """

    def __init__(self, entity_type: str, property_name: str, where: str):
        self.entity_type = entity_type
        self.property_name = property_name
        self.where = where

        super(InvalidQueryError, self).__init__(
            'Invalid navigation "{property_name}" for "{entity_type}" specified in {where}'.format(
                property_name=property_name,
                entity_type=entity_type,
                where=where)
        )


class UnsupportedRequestError(BaseODataSearchException):
    """ The request is valid, but this kind of request is not implemented """

    status_code = 501


class DisabledError(UnsupportedRequestError):
    """ The query option is disabled """


class NotFoundError(BaseODataSearchException):
    """ The addressed resource does not exist """

    status_code = 404


class FilterCompilationError(BaseODataSearchException):
    """ A filter expression could not be compiled into a search predicate

        This one is normally recovered from: see `FilterHandler(strict_filter=)`
    """


class SearchExecutionError(BaseODataSearchException):
    """ The search engine has failed to execute the query """


class SerializerError(BaseODataSearchException):
    """ The result can't be serialized

        `message_key` tells what exactly went wrong; see the constants below.
    """

    NO_CONTEXT_URL = 'NO_CONTEXT_URL'
    INCONSISTENT_PROPERTY_TYPE = 'INCONSISTENT_PROPERTY_TYPE'
    UNSUPPORTED_PROPERTY_TYPE = 'UNSUPPORTED_PROPERTY_TYPE'
    WRONG_PROPERTY_VALUE = 'WRONG_PROPERTY_VALUE'

    def __init__(self, err: str, message_key: str, *parameters):
        self.message_key = message_key
        self.parameters = parameters
        super(SerializerError, self).__init__(err)
