"""Root conftest — shared test configuration."""

import os

# Ensure tests don't accidentally use real API keys or real providers
os.environ.setdefault("ANTHROPIC_API_KEY", "sk-ant-test-fake-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("AUTH_JWT_SECRET", "test-jwt-secret-with-enough-bytes-for-hs256")
os.environ.setdefault("CRON_SECRET", "test-cron-secret")
os.environ.setdefault("RESEND_API_KEY", "")
os.environ.setdefault("TWILIO_ACCOUNT_SID", "")
os.environ.setdefault("EMAIL_BATCH_DELAY_SECONDS", "0")
os.environ.setdefault("SMS_SEND_DELAY_SECONDS", "0")
os.environ.setdefault("LOG_FORMAT", "text")
