MAX_IMAGE_BYTES = 10 * 1024 * 1024  # 10 MiB upload limit

# Generation parameters sent with every request
RESPONSE_MIME_TYPE = "application/json"
TEMPERATURE = 0.4
TOP_K = 32
TOP_P = 1
MAX_TOKENS_TO_GENERATE = 8192

DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_BASE_S = 1.0
DEFAULT_TIMEOUT_S = 60.0

DEFAULT_MODEL_NAME = "gemini-2.5-flash-preview-09-2025"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

NO_CROP_SENTINEL = "Error: No crops found."
NO_CROP_MARKER = "Error: No crops found"
DEFAULT_MEDICINES = "N/A (See treatment plan)"

N_DEBUG_RESPONSE_CHARS = 200
