import nox.sessions

PYTHON_VERSIONS = ['3.8', '3.9', '3.10', '3.11', '3.12']
ELASTICSEARCH_VERSIONS = [
    *(f'8.{x}.0' for x in range(0, 1 + 15)),
]


nox.options.reuse_existing_virtualenvs = True
nox.options.sessions = [
    'tests',
    'tests_elasticsearch',
]


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.sessions.Session, elasticsearch=None):
    """ Run all tests """
    session.install('-e', '.[test]')

    # Specific package versions
    if elasticsearch:
        session.install(f'elasticsearch=={elasticsearch}')

    # Test
    session.run('pytest', 'tests/', '--cov=odatasearch')


@nox.session(python=PYTHON_VERSIONS[-1])
@nox.parametrize('elasticsearch', ELASTICSEARCH_VERSIONS)
def tests_elasticsearch(session: nox.sessions.Session, elasticsearch):
    """ Test against a specific Elasticsearch client version """
    tests(session, elasticsearch)
