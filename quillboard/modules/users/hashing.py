import bcrypt

from quillboard.core.config import get_config_value


def hash_password(password):
    """Hash password with bcrypt at the configured work factor"""
    rounds = int(get_config_value('BCRYPT_ROUNDS', 10))
    hashed = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds=rounds))
    return hashed.decode('utf-8')


def check_password(password, password_hash):
    """Verify password against hash"""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False
