from dataclasses import dataclass


@dataclass(frozen=True)
class CallerIdentity:
    user_id: str
    is_barber: bool = False

    def can_act_for(self, user_id: str) -> bool:
        return self.is_barber or self.user_id == user_id
