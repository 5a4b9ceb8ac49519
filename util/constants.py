class InternalURIs:
    API = "/api"
    V1 = API + "/v1"
    PLAGIARISM = V1 + "/plagiarism"
    CHECK = PLAGIARISM + "/check"
    BULK = PLAGIARISM + "/bulk"
    BULK_ITEM = BULK + "/{batch_id}"


class Headers:
    USER_ID = "X-User-Id"


UNKNOWN_SOURCE = "Unknown Source"
UNKNOWN_URL = "#"
DEFAULT_LANGUAGE = "English"
UNAVAILABLE_REASON = "Analysis unavailable"
