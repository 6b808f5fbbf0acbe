import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13"]

nox.options.sessions = ["tests"]

# psycopg2 ships a C extension; poetry's wheel cache can hand back one built
# for another interpreter, so it is always rebuilt.
_C_EXT_PACKAGES = ["psycopg2"]


def _install(session: nox.Session) -> None:
    session.run("poetry", "install", "--all-extras", external=True)
    session.run("pip", "install", "--force-reinstall", "--no-cache-dir", *_C_EXT_PACKAGES)


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Full suite on the in-memory providers."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Aggregate tests only."""
    _install(session)
    session.run("pytest", "-m", "domain", *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_sqlite(session: nox.Session) -> None:
    """Full suite against SQLite through the SQLAlchemy provider."""
    _install(session)
    session.run("pytest", "--env", "sqlite", *session.posargs)
