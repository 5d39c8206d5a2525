# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles.

from academy.models.user import User  # noqa: F401  (doit précéder les profils)
from academy.models.teacher import Teacher  # noqa: F401
from academy.models.parent import Parent  # noqa: F401
from academy.models.student import StatusLog, Student  # noqa: F401
from academy.models.school_class import ClassAssistant, ClassStudent, SchoolClass  # noqa: F401
from academy.models.class_session import ClassSession  # noqa: F401
from academy.models.attendance import Attendance  # noqa: F401
from academy.models.material import Material, SessionMaterial  # noqa: F401
from academy.models.assignment import Assignment, Submission  # noqa: F401
from academy.models.tag import ClassTag, MaterialTag, SessionTag, StudentTag, Tag  # noqa: F401
