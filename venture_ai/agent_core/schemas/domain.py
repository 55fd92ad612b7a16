from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import Field

from .base import BaseSchema


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ConversationState(str, Enum):
    idle = "idle"
    chat = "chat"
    planning = "planning"
    creating = "creating"
    managing = "managing"
    researching = "researching"
    cleanup = "cleanup"


class Trigger(str, Enum):
    user_message = "user_message"
    business_idea_detected = "business_idea_detected"
    create_request = "create_request"
    manage_request = "manage_request"
    research_request = "research_request"
    cleanup_request = "cleanup_request"
    approval_received = "approval_received"
    task_complete = "task_complete"
    topic_change = "topic_change"


class MessageRole(str, Enum):
    system = "system"
    user = "user"
    assistant = "assistant"
    tool = "tool"


class ResourceCategory(str, Enum):
    domain = "domain"
    repository = "repository"
    chat_server = "chat-server"


class ProjectStatus(str, Enum):
    planning = "planning"
    active = "active"
    archived = "archived"
    deleted = "deleted"


class TurnOutcome(str, Enum):
    completed = "completed"
    approval_required = "approval_required"
    iteration_cap = "iteration_cap"
    service_error = "service_error"
    approval_granted = "approval_granted"
    approval_rejected = "approval_rejected"


class ToolName(str, Enum):
    # project
    create_project = "create_project"
    get_project = "get_project"
    list_projects = "list_projects"
    add_project_idea = "add_project_idea"
    add_project_research = "add_project_research"
    set_business_plan = "set_business_plan"
    set_project_status = "set_project_status"
    get_project_status = "get_project_status"
    link_domain = "link_domain"
    link_repository = "link_repository"
    link_chat_server = "link_chat_server"
    cleanup_project = "cleanup_project"
    # context
    get_overview = "get_overview"
    search_history = "search_history"
    get_server_info = "get_server_info"
    # domains
    search_domains = "search_domains"
    get_domain_pricing = "get_domain_pricing"
    register_domain = "register_domain"
    list_domains = "list_domains"
    get_domain_info = "get_domain_info"
    get_dns_records = "get_dns_records"
    set_dns_records = "set_dns_records"
    # repositories
    list_repositories = "list_repositories"
    get_repository = "get_repository"
    create_repository = "create_repository"
    create_repository_from_template = "create_repository_from_template"
    fork_repository = "fork_repository"
    create_file = "create_file"
    update_repository = "update_repository"
    delete_repository = "delete_repository"
    # chat servers
    create_server = "create_server"
    setup_channels = "setup_channels"
    invite_users = "invite_users"
    list_servers = "list_servers"
    delete_server = "delete_server"
    # payments
    connect_payment_account = "connect_payment_account"
    list_payment_accounts = "list_payment_accounts"
    disconnect_payment_account = "disconnect_payment_account"
    get_balance = "get_balance"
    list_customers = "list_customers"
    create_customer = "create_customer"
    list_payments = "list_payments"
    list_subscriptions = "list_subscriptions"
    list_products = "list_products"
    create_product = "create_product"
    create_price = "create_price"
    create_payment_link = "create_payment_link"
    get_revenue = "get_revenue"
    list_invoices = "list_invoices"
    # research
    web_search = "web_search"
    deep_research = "deep_research"
    market_research = "market_research"
    competitor_analysis = "competitor_analysis"
    extract_content = "extract_content"


class ConversationMessage(BaseSchema):
    role: MessageRole
    content: str

    author_id: Optional[str] = None
    author_name: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utc_now)

    tool_call_id: Optional[str] = None
    tool_name: Optional[str] = None


class PendingInvocation(BaseSchema):
    """A tool call held back until a human approves or rejects it."""

    tool_name: ToolName
    tool_args: Dict[str, Any] = Field(default_factory=dict)
    approval_prompt: str

    requested_by: Optional[str] = None
    created_at: datetime = Field(default_factory=_utc_now)


class ConversationContext(BaseSchema):
    key: str
    messages: List[ConversationMessage] = Field(default_factory=list)
    state: ConversationState = ConversationState.idle

    project_id: Optional[str] = None
    last_activity: datetime = Field(default_factory=_utc_now)

    pending_invocation: Optional[PendingInvocation] = None


class MessageContext(BaseSchema):
    """Where an inbound message came from and who sent it.

    A thread's identifier takes precedence over its parent channel, so a
    thread is a conversation of its own.
    """

    channel_id: str
    thread_id: Optional[str] = None

    author_id: str
    author_name: str

    reply_context: Optional[str] = None
    server_id: Optional[str] = None

    @property
    def context_key(self) -> str:
        return self.thread_id or self.channel_id


class StandingApproval(BaseSchema):
    approved: bool
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None


class DomainResource(BaseSchema):
    name: str
    registered_at: datetime = Field(default_factory=_utc_now)
    expires_at: Optional[datetime] = None


class RepositoryResource(BaseSchema):
    owner: str
    name: str
    url: Optional[str] = None


class ChatServerResource(BaseSchema):
    server_id: str
    name: str
    invite_url: Optional[str] = None


class ProjectResources(BaseSchema):
    domain: Optional[DomainResource] = None
    repository: Optional[RepositoryResource] = None
    chat_server: Optional[ChatServerResource] = None

    def is_empty(self) -> bool:
        return self.domain is None and self.repository is None and self.chat_server is None


class ProjectIdea(BaseSchema):
    text: str
    author: Optional[str] = None
    created_at: datetime = Field(default_factory=_utc_now)


class ResearchNote(BaseSchema):
    topic: str
    summary: str
    sources: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utc_now)


class ProjectPlanning(BaseSchema):
    ideas: List[ProjectIdea] = Field(default_factory=list)
    research: List[ResearchNote] = Field(default_factory=list)
    business_plan: Optional[str] = None
    approvals: Dict[ResourceCategory, StandingApproval] = Field(default_factory=dict)


class Project(BaseSchema):
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    description: Optional[str] = None

    status: ProjectStatus = ProjectStatus.planning
    created_by: Optional[str] = None
    thread_id: Optional[str] = None

    resources: ProjectResources = Field(default_factory=ProjectResources)
    planning: ProjectPlanning = Field(default_factory=ProjectPlanning)

    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


class ToolResult(BaseSchema):
    """Outcome of one tool invocation.

    ``needs_approval`` is the only field the agent loop acts on; everything
    else is forwarded to the reasoning service as opaque payload.
    """

    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None

    needs_approval: bool = False
    approval_prompt: Optional[str] = None


class TurnResult(BaseSchema):
    reply: str
    tools_used: List[str] = Field(default_factory=list)
    iterations: int
    state: ConversationState
    outcome: TurnOutcome


class HistoryMatch(BaseSchema):
    context_key: str
    message: ConversationMessage
