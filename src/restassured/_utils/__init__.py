from ._body_path import resolve_body_path
from ._request_spec import Outcome, ResolvedRequest

__all__ = ["Outcome", "ResolvedRequest", "resolve_body_path"]
