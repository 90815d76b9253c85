"""FanoutHub — topic membership and fire-and-forget delivery.

Each Connection owns a bounded outbound queue with drop-oldest semantics, so
publish() never blocks on a slow subscriber. Messages are serialized once per
publish and the same dict is queued for every member.
"""

import asyncio
import logging
import uuid
from collections import defaultdict, deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from src.ps_common.errors import AppError
from src.ps_common.schemas import CamelModel
from src.ps_fanout.domain import topics
from src.ps_fanout.domain.messages import UserCountMessage, UserCountPayload

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 256


@dataclass(frozen=True)
class Identity:
    user_id: str
    username: str
    is_guest: bool = False


IdentityResolver = Callable[[str], Identity]


class Connection:
    def __init__(self, conn_id: str, identity: Identity, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self.id = conn_id
        self.identity = identity
        self.topics: set[str] = set()
        self.dropped = 0
        self.closed = False
        self._queue: deque[dict[str, Any]] = deque(maxlen=queue_size)
        self._ready = asyncio.Event()

    @property
    def user_id(self) -> str:
        return self.identity.user_id

    def push(self, wire: dict[str, Any]) -> None:
        if self.closed:
            return
        if len(self._queue) == self._queue.maxlen:
            self.dropped += 1
        self._queue.append(wire)
        self._ready.set()

    def pending(self) -> int:
        return len(self._queue)

    def drain(self) -> list[dict[str, Any]]:
        items = list(self._queue)
        self._queue.clear()
        self._ready.clear()
        return items

    async def next(self) -> dict[str, Any] | None:
        """Wait for the next message. None once the connection is closed."""
        while not self._queue:
            if self.closed:
                return None
            self._ready.clear()
            await self._ready.wait()
        return self._queue.popleft()

    def close(self) -> None:
        self.closed = True
        self._ready.set()


class FanoutHub:
    def __init__(
        self,
        resolver: IdentityResolver | None = None,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ) -> None:
        self._resolver = resolver
        self._queue_size = queue_size
        self._connections: dict[str, Connection] = {}
        self._topics: dict[str, set[str]] = defaultdict(set)

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    def connect(
        self,
        token: str | None = None,
        user_id: str | None = None,
        username: str | None = None,
    ) -> Connection:
        conn_id = uuid.uuid4().hex
        identity = self._resolve(conn_id, token, user_id, username)
        conn = Connection(conn_id, identity, self._queue_size)
        self._connections[conn_id] = conn
        self.join(conn, topics.GENERAL)
        self.join(conn, topics.user_topic(identity.user_id))
        logger.info("Connected %s as %s (%d online)", conn_id, identity.username, self.presence_count)
        self._broadcast_presence()
        return conn

    def _resolve(
        self,
        conn_id: str,
        token: str | None,
        user_id: str | None,
        username: str | None,
    ) -> Identity:
        if token and self._resolver is not None:
            try:
                return self._resolver(token)
            except AppError as e:
                logger.info("Connection %s token rejected (%s), joining as guest", conn_id, e.message)
        if user_id:
            return Identity(user_id=user_id, username=username or user_id)
        return Identity(user_id=f"guest_{conn_id}", username=f"Guest_{conn_id[:6]}", is_guest=True)

    def disconnect(self, conn: Connection) -> None:
        if self._connections.pop(conn.id, None) is None:
            return
        for topic in list(conn.topics):
            self.leave(conn, topic)
        conn.close()
        logger.info("Disconnected %s (%d online)", conn.id, self.presence_count)
        self._broadcast_presence()

    def _broadcast_presence(self) -> None:
        self.publish(topics.GENERAL, UserCountMessage(data=UserCountPayload(count=self.presence_count)))

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def join(self, conn: Connection, topic: str) -> None:
        if conn.id not in self._connections:
            return
        self._topics[topic].add(conn.id)
        conn.topics.add(topic)

    def leave(self, conn: Connection, topic: str) -> None:
        members = self._topics.get(topic)
        if members is not None:
            members.discard(conn.id)
            if not members:
                del self._topics[topic]
        conn.topics.discard(topic)

    def members(self, topic: str) -> set[str]:
        return set(self._topics.get(topic, ()))

    @property
    def presence_count(self) -> int:
        return len(self._connections)

    def usernames(self) -> dict[str, str]:
        return {c.user_id: c.identity.username for c in self._connections.values()}

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def publish(self, topic: str, message: CamelModel) -> int:
        return self.publish_multi((topic,), message)

    def publish_multi(self, topic_names: Iterable[str], message: CamelModel) -> int:
        """Deliver to the union of members; each connection receives it at most once."""
        recipients: set[str] = set()
        for topic in topic_names:
            recipients |= self._topics.get(topic, set())
        if not recipients:
            return 0

        wire = message.to_wire()
        for conn_id in recipients:
            self._connections[conn_id].push(wire)
        return len(recipients)
