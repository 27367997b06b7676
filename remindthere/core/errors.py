"""
Error taxonomy for RemindMeThere.

None of these are fatal to the evaluation loop: the scheduler and
the engine catch them at the boundary where they can recover.
"""

class RemindThereError(Exception):
    """기본 예외"""

class TransientIOError(RemindThereError):
    """저장소 또는 위치 소스를 일시적으로 사용할 수 없음 (해당 틱 건너뜀)"""

class DeliveryError(RemindThereError):
    """알림 발송 실패"""

class InvalidReminderError(RemindThereError):
    """평가할 수 없는 리마인더 레코드"""

    def __init__(self, reminder_id: str, reason: str):
        super().__init__(f"invalid reminder {reminder_id}: {reason}")
        self.reminder_id = reminder_id
        self.reason = reason

class ValidationFailed(RemindThereError):
    """리마인더/핀 작성 입력 검증 실패"""
