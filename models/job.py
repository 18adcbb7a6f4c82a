"""
Job Model - Represents a production job to be scheduled

This module defines the Job class which encapsulates all information about
a production job including its due date, priority and machine requirements.

Key Attributes:
    - job_id: Unique identifier
    - due_date: Deadline for completion (datetime)
    - priority: Small positive integer, higher = more important
    - processing_time_min: How long the job takes to complete (minutes)
    - required_machine_type: Machine type, or the wildcard "any"
    - setup_group: Tooling family shared by jobs that avoid a changeover
"""

from datetime import datetime
from typing import Optional, Dict, Any
from dataclasses import dataclass

from models.exceptions import InvalidInputError


ANY_MACHINE_TYPE = "any"

# API layer sends camelCase, internal callers use snake_case
_FIELD_ALIASES = {
    "id": "job_id",
    "jobId": "job_id",
    "productSize": "product_size",
    "dueDate": "due_date",
    "processingTimeMin": "processing_time_min",
    "requiredMachineType": "required_machine_type",
    "moldId": "mold_id",
    "setupGroup": "setup_group",
    "isUrgent": "is_urgent",
    "createdAt": "created_at",
}


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp (a trailing "Z" is accepted).

    Args:
        value: datetime, ISO string or None

    Returns:
        datetime or None
    """
    if value is None or isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise InvalidInputError(f"Invalid timestamp: {value!r}") from exc


@dataclass(frozen=True)
class Job:
    """
    Represents a single production job in the manufacturing system.

    Jobs are read-only inputs to a scheduling run.

    Example:
        >>> job = Job(
        ...     job_id="J001",
        ...     due_date=datetime(2024, 5, 6, 18, 0),
        ...     priority=2,
        ...     processing_time_min=90,
        ...     required_machine_type="blow_mold",
        ...     setup_group="500ml",
        ... )
    """

    job_id: str                           # Unique job identifier (e.g., "J001")
    due_date: datetime                    # Deadline
    priority: int = 1                     # Higher = more important
    processing_time_min: float = 60       # Processing duration in minutes
    required_machine_type: str = ANY_MACHINE_TYPE
    product_size: Optional[str] = None    # e.g. "500ml"
    quantity: int = 0
    mold_id: Optional[str] = None
    setup_group: Optional[str] = None
    is_urgent: bool = False
    created_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate job data after initialization."""
        if self.processing_time_min <= 0:
            raise InvalidInputError(
                f"Processing time must be positive, got: {self.processing_time_min}",
                {"job_id": self.job_id}
            )

        if self.priority < 1:
            raise InvalidInputError(
                f"Priority must be a positive integer, got: {self.priority}",
                {"job_id": self.job_id}
            )

        # Empty setup group means "no setup group"
        if self.setup_group == "":
            object.__setattr__(self, "setup_group", None)

    @property
    def accepts_any_machine(self) -> bool:
        return self.required_machine_type == ANY_MACHINE_TYPE

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert job to dictionary for JSON serialization.

        Returns:
            Dictionary representation of the job
        """
        return {
            "job_id": self.job_id,
            "product_size": self.product_size,
            "quantity": self.quantity,
            "due_date": self.due_date.isoformat(),
            "priority": self.priority,
            "processing_time_min": self.processing_time_min,
            "required_machine_type": self.required_machine_type,
            "mold_id": self.mold_id,
            "setup_group": self.setup_group,
            "is_urgent": self.is_urgent,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Job':
        """
        Create a Job instance from a dictionary.

        Accepts both snake_case and camelCase keys; timestamps may be
        ISO strings.

        Args:
            data: Dictionary containing job data

        Returns:
            Job instance
        """
        fields = {_FIELD_ALIASES.get(key, key): value for key, value in data.items()}

        if "job_id" not in fields or "due_date" not in fields:
            raise InvalidInputError("Job requires 'job_id' and 'due_date'", {"data": data})

        fields["due_date"] = parse_timestamp(fields["due_date"])
        fields["created_at"] = parse_timestamp(fields.get("created_at"))
        fields["is_urgent"] = bool(fields.get("is_urgent") or False)

        known = set(cls.__dataclass_fields__)
        return cls(**{key: value for key, value in fields.items() if key in known})

    def __str__(self) -> str:
        """String representation for logging and debugging."""
        urgent_flag = " [URGENT]" if self.is_urgent else ""
        return (f"Job({self.job_id}: {self.required_machine_type}, "
                f"{self.processing_time_min}min, due {self.due_date:%Y-%m-%d %H:%M}"
                f"{urgent_flag})")
