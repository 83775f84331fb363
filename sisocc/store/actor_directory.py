"""Actor directory backed by a dictionary of known profiles."""

from __future__ import annotations

from sisocc.domain.occurrence import ActorProfile


class InMemoryActorDirectory:
    def __init__(self, profiles: list[ActorProfile] | None = None) -> None:
        self._profiles: dict[str, ActorProfile] = {}
        for profile in profiles or []:
            self.register(profile)

    def register(self, profile: ActorProfile) -> None:
        self._profiles[profile.id] = profile

    async def get(self, actor_id: str) -> ActorProfile | None:
        return self._profiles.get(actor_id)
