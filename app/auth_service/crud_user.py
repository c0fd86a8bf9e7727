from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.models import User

DEFAULT_USERNAME = "unknown"


def get_user_by_id(db: Session, user_id: str) -> User | None:
    """
    Lấy một user từ DB bằng GitHub user id.
    """
    return db.query(User).filter(User.id == user_id).first()


def upsert_user_token(db: Session, user_id: str, encrypted_token: str, username: str | None = None) -> User:
    """
    Lưu token đã mã hóa cho user. Tạo user nếu chưa tồn tại.
    Username chỉ được set khi tạo mới, user đã có thì giữ nguyên.
    """
    now = datetime.now(timezone.utc)
    db_user = get_user_by_id(db, user_id)
    if db_user is None:
        db_user = User(id=user_id, username=username or DEFAULT_USERNAME)
        db.add(db_user)

    db_user.encrypted_token = encrypted_token
    db_user.token_updated_at = now
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_user)
    return db_user


def clear_user_token(db: Session, user_id: str) -> int:
    """
    Xóa token đã lưu (set NULL), không xóa row user. Trả về số row bị ảnh hưởng.
    """
    try:
        updated = (
            db.query(User)
            .filter(User.id == user_id)
            .update(
                {User.encrypted_token: None, User.token_updated_at: datetime.now(timezone.utc)},
                synchronize_session=False,
            )
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    return updated


def ensure_user(db: Session, user_id: str, username: str) -> User:
    """
    Tạo user nếu chưa có, ngược lại cập nhật username. Dùng cho bootstrap script.
    """
    db_user = get_user_by_id(db, user_id)
    if db_user is None:
        db_user = User(id=user_id, username=username)
        db.add(db_user)
    else:
        db_user.username = username
    db.commit()
    db.refresh(db_user)
    return db_user
