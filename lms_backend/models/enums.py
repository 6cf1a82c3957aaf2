import enum

class ViewingStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

class CatalogStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive" # Hidden from learners; inactive videos do not count toward completion

class UserRole(str, enum.Enum):
    LEARNER = "Learner"
    INSTRUCTOR = "Instructor"
    ADMIN = "Admin"

# Using `values_callable=lambda obj: [e.value for e in obj]` on SAEnum columns stores the
# string values ("completed", "active") rather than the member names.
