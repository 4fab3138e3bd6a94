from functools import wraps

from flask import g, session

from autounite.exceptions import ForbiddenError, UnauthorizedError
from autounite.services import common


def login_required(fn):
    """Load the session user into `g.user`; anonymous or stale sessions get a 401."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        uid = session.get("uid")
        user = common._store().get_user(uid) if uid else None
        if user is None:
            session.clear()
            raise UnauthorizedError("Please login first")
        g.user = user
        return fn(*args, **kwargs)

    return wrapper


def role_required(*roles):
    def deco(fn):
        @wraps(fn)
        @login_required
        def wrapper(*args, **kwargs):
            if g.user.role not in roles:
                raise ForbiddenError("Insufficient permission")
            return fn(*args, **kwargs)

        return wrapper

    return deco
