from sqlalchemy.ext.asyncio import AsyncSession
from app.models.support.activity_models import UserActivity
from app.constants.activity_templates import ACTIVITY_TEMPLATES
from app.constants.activity_codes import ActivityCode


def actor_context(user) -> dict:
    return {
        "actor_role": (user.role or "user").capitalize(),
        "actor_email": user.email,
    }


async def emit_activity(
    db: AsyncSession,
    *,
    user_id,
    username: str,
    code: ActivityCode,
    **context,
):
    template = ACTIVITY_TEMPLATES.get(code)
    if not template:
        raise ValueError(f"No activity template for code {code}")

    try:
        message = template.format(**context)
    except KeyError as e:
        raise ValueError(
            f"Missing activity context key: {e.args[0]} for {code}"
        )

    db.add(
        UserActivity(
            user_id=user_id,
            username_snapshot=username,
            code=code.value,
            message=message,
        )
    )


async def emit_user_activity(db: AsyncSession, user, code: ActivityCode, **context):
    await emit_activity(
        db,
        user_id=user.id,
        username=user.email,
        code=code,
        **actor_context(user),
        **context,
    )
