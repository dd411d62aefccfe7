from eatoff.models.admin_refresh_token import AdminRefreshToken
from eatoff.models.admin_user import AdminUser
from eatoff.models.app_log import AppLog
from eatoff.models.audit_log import AuditLog
from eatoff.models.base import Base, TimestampMixin
from eatoff.models.customer import Customer
from eatoff.models.knowledge_article import KnowledgeArticle
from eatoff.models.restaurant import Restaurant
from eatoff.models.support_conversation import SupportConversation
from eatoff.models.support_message import SupportMessage
from eatoff.models.support_ticket import SupportTicket

__all__ = [
    "AdminRefreshToken",
    "AdminUser",
    "AppLog",
    "AuditLog",
    "Base",
    "TimestampMixin",
    "Customer",
    "KnowledgeArticle",
    "Restaurant",
    "SupportConversation",
    "SupportMessage",
    "SupportTicket",
]
