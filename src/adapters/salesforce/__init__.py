"""Cliente mínimo de Salesforce: un login (usuario + password/token) y una query fija."""

from adapters.salesforce.query import USER_QUERY, USER_QUERY_LIMIT, run_query, search
from adapters.salesforce.session import LoginResult, SalesforceSession, SessionManager

__all__ = [
    "LoginResult",
    "SalesforceSession",
    "SessionManager",
    "USER_QUERY",
    "USER_QUERY_LIMIT",
    "run_query",
    "search",
]
