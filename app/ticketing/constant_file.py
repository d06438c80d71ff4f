from dotenv import load_dotenv
import os

# Load environment variables from .env
load_dotenv()


def _env_flag(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# ------------------ Database ------------------
DB_USER = os.getenv("DB_USER")
DB_PASSWORD = os.getenv("DB_PASSWORD")
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = os.getenv("DB_PORT", 5432)
DB_NAME = os.getenv("DB_NAME")

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+psycopg2://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)

# ------------------ Tokens ------------------
jwt_secret = os.getenv("JWT_SECRET", "change-me")
jwt_refresh_secret = os.getenv("JWT_REFRESH_SECRET", jwt_secret + "-refresh")
jwt_algorithm = os.getenv("JWT_ALGORITHM", "HS256")
jwt_expire_minutes = int(os.getenv("JWT_EXPIRE_MINUTES", 60 * 24))
jwt_refresh_expire_days = int(os.getenv("JWT_REFRESH_EXPIRE_DAYS", 7))
bcrypt_rounds = int(os.getenv("BCRYPT_ROUNDS", 12))

email_verification_hours = 24
password_reset_minutes = 10

# ------------------ Mail ------------------
smtp_host = os.getenv("SMTP_HOST")
smtp_port = int(os.getenv("SMTP_PORT", 587))
smtp_email = os.getenv("SMTP_EMAIL", "tickets@example.com")
smtp_password = os.getenv("SMTP_PASSWORD", "")
mail_sender_name = os.getenv("MAIL_SENDER_NAME", "Event Tickets")

email_verification_subject = "Email verification token"
password_reset_subject = "Password reset token"
ticket_subject = "Your Event Ticket"
refund_subject = "Your ticket has been refunded"

public_base_url = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/")

# ------------------ Payments ------------------
mock_payment_secret = os.getenv("MOCK_PAYMENT_SECRET", "mock_payment_secret_key")
currency = os.getenv("CURRENCY", "INR")

# ------------------ Rate limiting ------------------
rate_limit_enabled = _env_flag("RATE_LIMIT_ENABLED")
general_rate_limit = os.getenv("GENERAL_RATE_LIMIT", "100 per 10 minutes")
login_rate_limit = os.getenv("LOGIN_RATE_LIMIT", "5 per 15 minutes")
registration_rate_limit = os.getenv("REGISTRATION_RATE_LIMIT", "10 per hour")
sensitive_rate_limit = os.getenv("SENSITIVE_RATE_LIMIT", "3 per hour")

# ------------------ Logging ------------------
log_level = os.getenv("LOG_LEVEL", "INFO")
log_dir = os.getenv("LOG_DIR")

# ------------------ Domain defaults ------------------
default_entry_pass_days = 30
api_version = "1.0.0"
