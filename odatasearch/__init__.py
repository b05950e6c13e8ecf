"""
odatasearch answers OData-style requests from an [Elasticsearch](https://www.elastic.co/) index.

The client speaks OData: entity sets, navigation, `$filter`, `$select`, `$orderby`, `$top`, `$skip`, `$count`:

```
GET /Authors('1')/books?$filter=year ge 2000&$orderby=year desc&$top=10
```

The search engine knows nothing about entity types, navigation, or typed properties:
only indices, document fields, and parent/child joins.

odatasearch stands in between: it compiles the parsed request into one search query,
runs it, and projects the matching documents back into typed entities, ready to be serialized.
"""

# Exceptions that are used here and there
from .exc import *

# odatasearch needs a lot of information about your entity types.
# All this is handled by the Entity Data Model:
from .schema import EntityDataModel, EdmEntityType, EdmComplexType, EdmEntitySet, EdmProperty, EdmNavigationProperty

# Parsed request objects
from .uri import EntitySetSegment, NavigationSegment, PrimitivePropertySegment, KeyPredicate
from .uri import Member, Literal, Comparison, Method, And, Or, Not, OrderByItem

# The heart of odatasearch are the handlers:
# that's where your query options are converted to an actual search request!
from . import handlers

# ODataQuery is the man that takes your parsed request and feeds every query option to its handler.
from .query import ODataQuery
from .pagination import Pagination, Sort

# Search, project, serialize
from .search import SearchRequest, SearchResult, RawHit, SearchExecutor
from .projector import ResultProjector, Entity, EntityCollection, Property, ComplexValue, Operation
from .serializer import ODataJsonSerializer, ContextURL, SerializerResult

# All together
from .retriever import DataRetriever

# Helpers
from .util import ODataQuerySettingsDict
