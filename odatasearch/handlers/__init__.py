"""

odatasearch answers OData-style requests from a search engine index.

A request consists of a resource path, and a set of query options:

```
GET /Authors('1')/books?$filter=year ge 2000&$select=title,year&$orderby=year desc&$top=10&$count=true
```

Your OData parser turns it into objects (see `odatasearch.uri`), and ODataQuery turns them into one search request.


Query Options
-------------

Every part of the request is handled by its own handler:

* `path`: [Resource Path](#resource-path) finds the entities: one entity set, navigated through parent/child joins
* `filter`: [Filter](#filter) filters the entities, using your criteria
* `select`: [Select](#select) selects the properties to be returned
* `expand`: [Expand](#expand) names the navigation properties the client wants expanded
* `orderby`: [Order By](#order-by) determines the sorting of the results
* `top`, `skip`: [Top & Skip](#top--skip) paginates the results
* `count`: [Count](#count) counts the matching entities

Detailed syntax for every query option is provided in the relevant sections.
"""

from .path import ResourcePathHandler
from .filter import FilterHandler
from .select import SelectHandler
from .expand import ExpandHandler
from .orderby import OrderByHandler
from .limit import LimitHandler
from .count import CountHandler
