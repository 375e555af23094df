from st.common.logger import log


# Moves the active participant forward or back with wraparound, committing the outgoing turn and starting the
# incoming one. Pause state carries across a rotation; a paused rotation defers the new turn until resume.
class RotationController:

    def __init__(self, tracker, accumulator, roster, emit, state=None):
        self._tracker = tracker
        self._accumulator = accumulator
        self._roster = roster       # callable returning the current participants tuple
        self._emit = emit
        self.state = state

    def current_name(self):
        participants = self._roster()
        if not participants:
            return None
        index = self.state.current_participant_index
        if 0 <= index < len(participants):
            return participants[index]
        return None

    def advance(self, direction):
        if direction not in (1, -1):
            raise ValueError(f"Rotation direction must be 1 or -1, got {direction!r}")
        participants = self._roster()
        count = len(participants)
        if count == 0:
            return False

        outgoing = self.current_name()
        spent = self._tracker.commit_turn(outgoing)

        self.state.current_participant_index = (self.state.current_participant_index + direction + count) % count
        self.state.elapsed_time = 0
        self._accumulator.restart()

        incoming = self.current_name()
        if not self.state.is_paused:
            self._tracker.start_turn(incoming)

        log.debug(f"Rotated from '{outgoing}' ({spent}s committed) to '{incoming}' "
                  f"at index {self.state.current_participant_index}, paused={self.state.is_paused}")
        self._emit("participantChanged")
        return True

    def next(self):
        return self.advance(1)

    def previous(self):
        return self.advance(-1)
