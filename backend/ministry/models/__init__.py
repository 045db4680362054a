"""ORM Models — SQLAlchemy declarative models for all ministry entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Member is the aggregate root for everything personal; content, events and
      workflows are ministry-wide

Design Decisions:
    - One file per aggregate for locality (ADR: max 3-4 files to understand a feature)
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs (ADR: standard SQLAlchemy pattern)
"""

from ministry.models.member import Member, SpiritualProfile, EmailSubscription  # noqa: F401
from ministry.models.activity import MemberActivity  # noqa: F401
from ministry.models.donation import Donation  # noqa: F401
from ministry.models.prayer import PrayerRequest, PrayerInteraction  # noqa: F401
from ministry.models.content import (  # noqa: F401
    Teaching, TeachingProgress, Resource, Sermon, Prophecy,
)
from ministry.models.event import Event, EventRegistration  # noqa: F401
from ministry.models.gallery import GalleryAlbum, GalleryPhoto  # noqa: F401
from ministry.models.contact import ContactSubmission  # noqa: F401
from ministry.models.volunteer import (  # noqa: F401
    VolunteerTeam, VolunteerTeamMember, VolunteerAvailability, VolunteerSchedule,
)
from ministry.models.notification import Notification  # noqa: F401
from ministry.models.gamification import MemberStreak, MemberBadge  # noqa: F401
from ministry.models.season import Season, MemberSeason  # noqa: F401
from ministry.models.live import LiveService, LiveAttendance  # noqa: F401
from ministry.models.email import EmailCampaign, EmailSendLog  # noqa: F401
from ministry.models.sms import SmsMessage  # noqa: F401
from ministry.models.workflow import Workflow, WorkflowExecution  # noqa: F401
from ministry.models.ai import (  # noqa: F401
    AiConfig, AiKnowledgeEntry, AiConversation, AiMessage,
)
from ministry.models.group import Group, GroupMember  # noqa: F401
