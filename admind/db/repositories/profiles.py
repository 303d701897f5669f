from typing import Optional

from sqlalchemy.orm import Session

from admind.db.models import Profile, utcnow


class ProfilesRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: str) -> Optional[Profile]:
        return self.session.get(Profile, user_id)

    def upsert(self, user_id: str, **fields) -> Profile:
        profile = self.get(user_id)
        if profile is None:
            profile = Profile(id=user_id)
            self.session.add(profile)
        for key, value in fields.items():
            setattr(profile, key, value)
        profile.updated_at = utcnow()
        self.session.commit()
        self.session.refresh(profile)
        return profile
