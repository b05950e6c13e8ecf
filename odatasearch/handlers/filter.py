"""
### Filter

Filtering corresponds to the `$filter` query option: a boolean expression over the properties of the entity.

```
GET /Books?$filter=year ge 2000 and author_name eq 'Frank Herbert'
GET /Books?$filter=isbn eq null
GET /Books?$filter=contains(title, 'Dune')
```

The expression comes already parsed, as a tree of `odatasearch.uri` nodes.
It is compiled into a search engine predicate:

* `eq`: `term`. When compared to `null`, it becomes "the field does not exist".
* `ne`: the negation of `eq`. `ne null` becomes "the field exists".
* `gt`, `ge`, `lt`, `le`: `range`
* `contains()`, `endswith()`: `wildcard`; `startswith()`: `prefix`
* `and`, `or`, `not`: boolean queries

The identifier property is special: `_id eq '1'` is an `ids` query. Comparing it to `null` is an error.

Text properties marked as `keyword` in the schema are matched against their exact-match sub-field (`title.keyword`).

A filter that can't be compiled (unknown property, unsupported operator) is, by default, ignored: the request
proceeds without it, and a warning is logged. Use `strict_filter=True` to reject such requests instead.
"""

import logging

from .base import ODataQueryHandlerBase
from .. import dsl
from ..exc import FilterCompilationError, InvalidValueError, UnsupportedRequestError
from ..schema import ID_FIELD_NAME
from ..uri import Member, Literal, Comparison, Method, And, Or, Not

logger = logging.getLogger(__name__)


class FilterHandler(ODataQueryHandlerBase):
    """ $filter: compile an expression tree into a search predicate

        Input: an `odatasearch.uri.Expression`, or None
    """

    query_option_name = 'filter'

    def __init__(self, entity_set, schema, strict_filter=False, keyword_suffix='.keyword', force_filter=None):
        """ Init a filter

        :param entity_set: The entity set to filter
        :param schema: The Entity Data Model
        :param strict_filter: Raise an error when the filter can't be compiled.
            By default, such a filter is dropped, and the request proceeds without it.
        :param keyword_suffix: The exact-match sub-field suffix for properties that are `keyword`
        :param force_filter: A filtering condition that will be forcefully applied to every query.
            Can be:
                * a dict: a search engine query, which will become ANDed to every request ;
                * a `lambda entity_set:` that returns such a dict
        """
        super(FilterHandler, self).__init__(entity_set, schema)

        # Settings
        self.strict_filter = strict_filter
        self.keyword_suffix = keyword_suffix

        if force_filter is None or callable(force_filter) or isinstance(force_filter, dict):
            self.force_filter = force_filter
        else:
            raise ValueError(force_filter)

        # On input
        self.expression = None
        self.query = None

    # Comparison operators, applied to (self, property, field, value)
    # When the literal comes first, the comparison is mirrored
    _mirrored_operators = {
        'eq': 'eq',
        'ne': 'ne',
        'gt': 'lt',
        'ge': 'le',
        'lt': 'gt',
        'le': 'ge',
    }

    # OData operator => range operator
    _range_operators = {
        'gt': 'gt',
        'ge': 'gte',
        'lt': 'lt',
        'le': 'lte',
    }

    def input(self, expression):
        super(FilterHandler, self).input(expression)
        self.expression = expression
        self.query = self.compile_expression(expression) if expression is not None else None
        return self

    def compile_expression(self, expression):
        """ Compile the expression, applying the failure policy

        :rtype: dict | None
        :raises UnsupportedRequestError: the filter can't be compiled, and `strict_filter` is on
        :raises InvalidValueError: the filter is semantically wrong (never ignored)
        """
        try:
            return self._compile(expression)
        except FilterCompilationError as e:
            if self.strict_filter:
                raise UnsupportedRequestError(str(e)) from e
            logger.warning('Ignoring the filter on %s: %s', self.entity_set.name, e)
            return None

    def _compile(self, node):
        """ Compile an expression node into a search predicate """
        if isinstance(node, And):
            return dsl.and_(self._compile(node.left), self._compile(node.right))
        elif isinstance(node, Or):
            return dsl.or_(self._compile(node.left), self._compile(node.right))
        elif isinstance(node, Not):
            return dsl.not_(self._compile(node.operand))
        elif isinstance(node, Comparison):
            return self._compile_comparison(node)
        elif isinstance(node, Method):
            return self._compile_method(node)
        else:
            raise FilterCompilationError('Unsupported expression: {!r}'.format(node))

    def _compile_comparison(self, node):
        op, left, right = node.op, node.left, node.right
        if op not in self._mirrored_operators:
            raise FilterCompilationError('Unsupported operator: {}'.format(op))

        # 'x' eq name  ->  name eq 'x'
        if isinstance(left, Literal) and isinstance(right, Member):
            op, left, right = self._mirrored_operators[op], right, left

        if not isinstance(left, Member) or not isinstance(right, Literal):
            raise FilterCompilationError('A property can only be compared to a value: {!r}'.format(node))

        prop, field = self._resolve_member(left)
        value = right.value

        if op == 'eq':
            return self._compile_eq(prop, field, value)
        elif op == 'ne':
            # Negation of `eq`, but `ne null` simply means "exists"
            if value is None and field != ID_FIELD_NAME:
                return dsl.exists(field)
            return dsl.not_(self._compile_eq(prop, field, value))
        else:
            if value is None:
                raise FilterCompilationError('Can not compare "{}" with null using "{}"'.format(left, op))
            return dsl.range_(self._keyword_field(prop, field), self._range_operators[op], value)

    def _compile_eq(self, prop, field, value):
        # Identifier
        if field == ID_FIELD_NAME:
            if value is None:
                raise InvalidValueError('Id value can not be null')
            return dsl.ids([value])

        # Null: the field does not exist
        if value is None:
            return dsl.not_(dsl.exists(field))

        return dsl.term(self._keyword_field(prop, field), value)

    def _compile_method(self, node):
        if node.name not in ('contains', 'startswith', 'endswith'):
            raise FilterCompilationError('Unsupported function: {}'.format(node.name))
        if len(node.args) != 2 or not isinstance(node.args[0], Member) or not isinstance(node.args[1], Literal):
            raise FilterCompilationError('{}() expects a property and a value: {!r}'.format(node.name, node))
        if not isinstance(node.args[1].value, str):
            raise FilterCompilationError('{}() expects a string value: {!r}'.format(node.name, node))

        prop, field = self._resolve_member(node.args[0])
        field = self._keyword_field(prop, field)
        value = node.args[1].value

        if node.name == 'startswith':
            return dsl.prefix(field, value)
        elif node.name == 'endswith':
            return dsl.wildcard(field, '*' + dsl.escape_wildcard(value))
        else:
            return dsl.wildcard(field, '*' + dsl.escape_wildcard(value) + '*')

    def _resolve_member(self, member):
        """ Resolve a Member into (property, backing field name)

            `Member('address', 'city')` is a sub-property of a complex property: 'address.city'
        """
        path = member.path
        prop = self.entity_type.get_property(path[0]) if path else None
        if prop is None:
            raise FilterCompilationError('Unknown property: {!r}'.format(member))

        # Plain property
        if len(path) == 1:
            return prop, prop.field

        # Complex property
        if len(path) == 2 and prop.is_complex:
            sub_prop = prop.complex_type.get_property(path[1])
            if sub_prop is not None:
                return sub_prop, '{}.{}'.format(prop.field, sub_prop.field)

        raise FilterCompilationError('Unknown property: {!r}'.format(member))

    def _keyword_field(self, prop, field):
        """ Use the exact-match sub-field when the property needs it """
        if self.schema.needs_keyword(prop):
            return field + self.keyword_suffix
        return field

    def compile_force_filter(self):
        """ Get the forced filter for this entity set

        :rtype: dict | None
        """
        if callable(self.force_filter):
            return self.force_filter(self.entity_set)
        return self.force_filter

    def compile_statement(self):
        """ Get the final filter: the user's filter ANDed with the forced one

        :rtype: dict | None
        """
        queries = [q for q in (self.query, self.compile_force_filter()) if q is not None]
        return dsl.anded_together(queries) if queries else None

    def alter_request(self, request):
        request.filter = self.compile_statement()
        return request
