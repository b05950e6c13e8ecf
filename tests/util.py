import json


def search_response(*hits, total=None):
    """ Make a search engine response

        :param hits: (id, source) tuples
        :param total: hits.total; default: the number of hits
    """
    return {
        'took': 1,
        'timed_out': False,
        'hits': {
            'total': {'value': len(hits) if total is None else total, 'relation': 'eq'},
            'max_score': None,
            'hits': [
                {'_index': 'library', '_id': id, '_score': None, '_source': source}
                for id, source in hits
            ],
        },
    }


class FakeElasticsearch:
    """ A stand-in for `elasticsearch.Elasticsearch`

        Records the kwargs of every search() call, and returns canned responses, in order.
        When out of responses, it finds nothing.
    """

    def __init__(self, *responses, error: Exception = None):
        self.responses = list(responses)
        self.error = error
        self.calls = []

    def search(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        if self.responses:
            return self.responses.pop(0)
        return search_response()

    @property
    def last_call(self) -> dict:
        return self.calls[-1]


def loads(result):
    """ Parse a SerializerResult """
    return json.loads(result.content)
