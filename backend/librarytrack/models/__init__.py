# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant Base.metadata.create_all() (voir database.init_db).

from librarytrack.models.student import Student  # noqa: F401
from librarytrack.models.entry_log import EntryLog  # noqa: F401
from librarytrack.models.branch import Branch  # noqa: F401
from librarytrack.models.app_setting import AppSetting  # noqa: F401
from librarytrack.models.admin import AdminCredential  # noqa: F401
