"""Bridge — connects a runner's move stream to the position and the strategem.

One bridge plays one game for one side. The loop it implements::

    AWAITING_OPPONENT_MOVE --submit_opponent_move--> COMPUTING_OWN_MOVE
    COMPUTING_OWN_MOVE --strategem decides--> AWAITING_SUBMISSION_ACK
    AWAITING_SUBMISSION_ACK --confirm_submission--> AWAITING_OPPONENT_MOVE

Any phase moves to GAME_OVER once the position has no legal move or a
draw applies. ``resynchronize`` may be called from any phase.

Listeners subscribe through :class:`BridgeEvents`, the same way UI code
subscribes to game events: plain lists of callbacks.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from chessbot.core.enums import Color
from chessbot.core.move import Move
from chessbot.core.notation.coordinate import move_to_coordinate, parse_move
from chessbot.core.notation.fen import STARTING_FEN, position_from_fen, position_to_fen
from chessbot.core.notation.san import move_to_san
from chessbot.core.position import Position
from chessbot.core.rules import GameState, Rules
from chessbot.errors import BridgeStateError, StrategemContractViolation, UnrecognizedMoveError
from chessbot.game.interfaces import BridgePhase
from chessbot.strategems.base import Strategem

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BotMove:
    """A move chosen by the bot, ready to be replayed externally."""

    move: Move
    notation: str  # coordinate form, e.g. "e7e8q"
    san: str

    def __str__(self) -> str:
        return self.notation


@dataclass(frozen=True, slots=True)
class MoveRecord:
    """One ply of the game as seen by the bridge."""

    ply: int
    color: Color
    move: Move
    san: str
    by_bot: bool


# ── Event definitions ────────────────────────────────────────────────────────

BotMoveCallback = Callable[[BotMove], None]
GameStateCallback = Callable[[GameState], None]
PhaseCallback = Callable[[BridgePhase], None]
SubmissionFailedCallback = Callable[[BotMove, str], None]  # move, reason


@dataclass
class BridgeEvents:
    """Observable callbacks. Multiple handlers per event."""

    on_bot_move: list[BotMoveCallback] = field(default_factory=list)
    on_game_state: list[GameStateCallback] = field(default_factory=list)
    on_phase_changed: list[PhaseCallback] = field(default_factory=list)
    on_submission_failed: list[SubmissionFailedCallback] = field(default_factory=list)


# ── Bridge ───────────────────────────────────────────────────────────────────


class Bridge:
    """Runs one side of a game: applies opponent moves, answers with our own.

    Strictly synchronous; a runner that polls concurrently must serialise
    its calls. The live :attr:`position` is owned by the bridge and must be
    treated as read-only by everybody else; strategems receive a snapshot.
    """

    __slots__ = (
        "_strategem",
        "_side",
        "_position",
        "_claim_draws",
        "_phase",
        "_state",
        "_pending",
        "_history",
        "events",
    )

    def __init__(
        self,
        strategem: Strategem,
        side: Color = Color.BLACK,
        position: Position | None = None,
        claim_draws: bool = True,
    ) -> None:
        self._strategem = strategem
        self._side = side
        self._position = position if position is not None else Position()
        self._claim_draws = claim_draws
        self._phase = BridgePhase.AWAITING_OPPONENT_MOVE
        self._state = Rules.game_state(self._position, claim_draws=claim_draws)
        self._pending: BotMove | None = None
        self._history: list[MoveRecord] = []
        self.events = BridgeEvents()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def strategem(self) -> Strategem:
        return self._strategem

    @property
    def side(self) -> Color:
        return self._side

    @property
    def position(self) -> Position:
        return self._position

    @property
    def phase(self) -> BridgePhase:
        return self._phase

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def pending(self) -> BotMove | None:
        """The bot move awaiting submission acknowledgement, if any."""
        return self._pending

    @property
    def history(self) -> list[MoveRecord]:
        return list(self._history)

    @property
    def fen(self) -> str:
        return position_to_fen(self._position)

    def legal_moves(self) -> list[Move]:
        return self._position.legal_moves()

    # ── Runner-facing operations ─────────────────────────────────────────

    def start(self) -> BotMove | None:
        """Begin play. Returns the bot's first move if it is the bot's turn."""
        self._require(BridgePhase.AWAITING_OPPONENT_MOVE)
        if self._finish_if_over():
            return None
        if self._position.side_to_move != self._side:
            return None
        return self._play_own_move()

    def submit_opponent_move(self, notation: str) -> BotMove | None:
        """Apply the opponent's move and answer with the bot's reply.

        Returns None when the opponent's move ended the game.

        Raises:
            UnrecognizedMoveError: *notation* is malformed or not legal here.
                The bridge state is unchanged; the runner should resend or
                resynchronise.
            BridgeStateError: not waiting for an opponent move.
        """
        self._require(BridgePhase.AWAITING_OPPONENT_MOVE)
        if self._position.side_to_move == self._side:
            raise BridgeStateError(f"{self._side} (the bot) is to move; call start()")

        try:
            move = parse_move(self._position, notation)
        except UnrecognizedMoveError as exc:
            _LOGGER.warning("Desynchronised with runner: %s (fen %s)", exc, self.fen)
            raise

        self._record(move, by_bot=False)
        return self._play_own_move()

    def confirm_submission(self) -> None:
        """The runner entered the pending bot move externally."""
        self._require(BridgePhase.AWAITING_SUBMISSION_ACK)
        self._pending = None
        if self._state.is_over:
            self._set_phase(BridgePhase.GAME_OVER)
        else:
            self._set_phase(BridgePhase.AWAITING_OPPONENT_MOVE)

    def report_submission_failure(self, reason: str) -> None:
        """The runner could not enter the pending bot move.

        Nothing is retried; the bridge stays in AWAITING_SUBMISSION_ACK
        until the runner confirms or resynchronises.
        """
        self._require(BridgePhase.AWAITING_SUBMISSION_ACK)
        assert self._pending is not None
        _LOGGER.warning("Submission of %s failed: %s", self._pending.notation, reason)
        for cb in self.events.on_submission_failed:
            cb(self._pending, reason)

    def resynchronize(self, fen: str | None = None, moves: Sequence[str] = ()) -> BotMove | None:
        """Rebuild the game from *fen* plus *moves* as the runner sees it.

        Allowed in any phase. Any pending bot move is dropped. If the bot is
        to move afterwards its reply is computed and returned, as in
        :meth:`start`.
        """
        position = position_from_fen(fen or STARTING_FEN)
        _LOGGER.warning("Resynchronising at %s after %d moves", position_to_fen(position), len(moves))

        history: list[MoveRecord] = []
        for notation in moves:
            move = parse_move(position, notation)
            color = position.side_to_move
            san = move_to_san(position, move)
            position.apply(move)
            history.append(MoveRecord(len(history) + 1, color, move, san, color == self._side))

        self._position = position
        self._history = history
        self._pending = None
        self._state = Rules.game_state(position, claim_draws=self._claim_draws)
        self._set_phase(BridgePhase.AWAITING_OPPONENT_MOVE)
        return self.start()

    # ── Internal helpers ─────────────────────────────────────────────────

    def _play_own_move(self) -> BotMove | None:
        self._set_phase(BridgePhase.COMPUTING_OWN_MOVE)
        if self._finish_if_over():
            return None

        legal = self.legal_moves()
        choice = self._strategem.decide(self._position.snapshot(), tuple(legal))
        if choice not in legal:
            _LOGGER.error(
                "%r returned %r, not one of %d legal moves at %s",
                self._strategem, choice, len(legal), self.fen,
            )
            self._set_phase(BridgePhase.GAME_OVER)
            raise StrategemContractViolation(self._strategem.name, choice)

        san = self._record(choice, by_bot=True)
        bot_move = BotMove(choice, move_to_coordinate(choice), san)
        self._pending = bot_move
        self._set_phase(BridgePhase.AWAITING_SUBMISSION_ACK)
        for cb in self.events.on_bot_move:
            cb(bot_move)
        if self._state.is_over:
            self._announce_game_over()
        return bot_move

    def _record(self, move: Move, *, by_bot: bool) -> str:
        """Apply *move*, append it to the history and return its SAN."""
        color = self._position.side_to_move
        san = move_to_san(self._position, move)
        self._position.apply(move)
        self._history.append(MoveRecord(len(self._history) + 1, color, move, san, by_bot))
        self._state = Rules.game_state(self._position, claim_draws=self._claim_draws)
        return san

    def _finish_if_over(self) -> bool:
        if not self._state.is_over:
            return False
        self._set_phase(BridgePhase.GAME_OVER)
        self._announce_game_over()
        return True

    def _announce_game_over(self) -> None:
        _LOGGER.info("Game over after %d plies: %s", len(self._history), self._state)
        for cb in self.events.on_game_state:
            cb(self._state)

    def _require(self, phase: BridgePhase) -> None:
        if self._phase != phase:
            raise BridgeStateError(f"Expected phase {phase.name}, bridge is in {self._phase.name}")

    def _set_phase(self, phase: BridgePhase) -> None:
        if phase == self._phase:
            return
        _LOGGER.debug("Bridge phase %s -> %s", self._phase.name, phase.name)
        self._phase = phase
        for cb in self.events.on_phase_changed:
            cb(phase)
