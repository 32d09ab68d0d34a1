from .companies import CompanyStore
from .jobs import JobStore
from .users import UserStore

__all__ = ["CompanyStore", "JobStore", "UserStore"]
