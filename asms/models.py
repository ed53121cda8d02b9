from datetime import date, datetime
import enum

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from asms.dependencies.database import Base


class UserRole(enum.Enum):
    APPLICANT = "applicant"
    ADMIN = "admin"


class ApplicationStatus(enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    DISBURSED = "disbursed"


class DocumentType(enum.Enum):
    PROFILE = "profile"
    DOCUMENT = "document"


class NotificationCategory(enum.Enum):
    SUCCESS = "success"
    WARNING = "warning"
    INFO = "info"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    full_name = Column(String(120), nullable=False)
    email = Column(String(120), unique=True, nullable=False, index=True)
    mobile_number = Column(String(20), nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(
        Enum(UserRole, name="user_role", values_callable=_enum_values),
        default=UserRole.APPLICANT,
        nullable=False,
    )
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    applications = relationship("Application", back_populates="user", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")


class Scheme(Base):
    __tablename__ = "schemes"

    id = Column(Integer, primary_key=True)
    name = Column(String(120), nullable=False)
    scheme_type = Column(String(120), nullable=True)
    grade = Column(String(120), nullable=True)
    year = Column(String(20), nullable=True)
    category = Column(String(120), nullable=True)
    criteria = Column(Text, nullable=True)
    documents_required = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    amount = Column(Numeric(10, 2), nullable=True)
    last_date = Column(Date, nullable=False, index=True)
    published_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    applications = relationship("Application", back_populates="scheme")

    def is_open_on(self, day: date) -> bool:
        return day <= self.last_date

    @property
    def is_open(self) -> bool:
        return self.is_open_on(datetime.utcnow().date())


class Application(Base):
    __tablename__ = "applications"
    __table_args__ = (UniqueConstraint("user_id", "scheme_id", name="uq_application_user_scheme"),)

    id = Column(Integer, primary_key=True)
    application_number = Column(String(32), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    scheme_id = Column(Integer, ForeignKey("schemes.id", ondelete="CASCADE"), nullable=False, index=True)
    date_of_birth = Column(Date, nullable=False)
    gender = Column(String(50), nullable=False)
    category = Column(String(120), nullable=False)
    major = Column(String(120), nullable=False)
    address = Column(Text, nullable=False)
    external_student_id = Column(String(120), nullable=False)
    profile_picture = Column(String(512), nullable=False)
    document_ref = Column(String(512), nullable=False)
    status = Column(
        Enum(ApplicationStatus, name="application_status", values_callable=_enum_values),
        default=ApplicationStatus.PENDING,
        nullable=False,
        index=True,
    )
    remark = Column(Text, nullable=True)
    disbursed_amount = Column(Numeric(10, 2), nullable=True)
    apply_date = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="applications")
    scheme = relationship("Scheme", back_populates="applications", lazy="joined")
    documents = relationship("Document", back_populates="application", cascade="all, delete-orphan")
    bank_detail = relationship(
        "BankDetail", back_populates="application", uselist=False, cascade="all, delete-orphan"
    )

    @property
    def scheme_name(self) -> str | None:
        return self.scheme.name if self.scheme is not None else None


class Document(Base):
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True)
    application_id = Column(Integer, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    document_type = Column(
        Enum(DocumentType, name="document_type", values_callable=_enum_values),
        nullable=False,
    )
    original_name = Column(String(255), nullable=False)
    file_path = Column(String(512), nullable=False)
    mime_type = Column(String(100), nullable=False)
    file_size = Column(Integer, nullable=False)
    checksum = Column(String(64), nullable=False)  # SHA256
    uploaded_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    application = relationship("Application", back_populates="documents")


class BankDetail(Base):
    __tablename__ = "bank_details"

    id = Column(Integer, primary_key=True)
    application_id = Column(
        Integer, ForeignKey("applications.id", ondelete="CASCADE"), unique=True, nullable=False, index=True
    )
    application_number = Column(String(32), nullable=False, index=True)  # display alias
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    account_holder_name = Column(String(120), nullable=False)
    bank_name = Column(String(120), nullable=False)
    branch_name = Column(String(120), nullable=False)
    swift_code = Column(String(20), nullable=False)
    account_number = Column(String(40), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    application = relationship("Application", back_populates="bank_detail")


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    category = Column(
        Enum(NotificationCategory, name="notification_category", values_callable=_enum_values),
        default=NotificationCategory.INFO,
        nullable=False,
    )
    action_type = Column(String(50), nullable=True)
    action_id = Column(Integer, nullable=True)
    is_read = Column(Boolean, default=False, nullable=False, index=True)
    read_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    user = relationship("User", back_populates="notifications")
