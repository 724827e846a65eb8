from tinbr.models.document import Document, new_document_id, utc_now
from tinbr.models.unique_key import UniqueKey, GLOBAL_SCOPE, UNIQUE_KEY_CONSTRAINT
