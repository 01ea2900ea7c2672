import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma-separated list; '*' allows any origin (LAN party default)
    CORS_ALLOWED_ORIGINS = os.environ.get('CORS_ALLOWED_ORIGINS', '*')
    # Time a buzzed player has to submit a guess (seconds)
    ANSWER_TIMEOUT_SEC = int(os.environ.get('ANSWER_TIMEOUT_SEC', '15'))
    MAX_NAME_LENGTH = int(os.environ.get('MAX_NAME_LENGTH', '20'))
    # Used when the host sends no usable round count
    DEFAULT_TOTAL_ROUNDS = int(os.environ.get('DEFAULT_TOTAL_ROUNDS', '10'))
    # Optional: address advertised to the host screen. Empty means auto-detect LAN IP.
    SERVER_ADDRESS = os.environ.get('SERVER_ADDRESS', '')
    PORT = int(os.environ.get('PORT', '3000'))
