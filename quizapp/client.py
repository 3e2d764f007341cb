"""Async HTTP client for taking a quiz against the API.

``QuizAttempt`` walks the questions of one attempt: it resumes an attempt that
is already in progress, saves every answer as soon as it is given, tracks the
quiz's time limit and completes the attempt when time runs out. Scores always
come from the server.
"""
import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class QuizClient:
    def __init__(self, base_url: str, transport: Optional[httpx.AsyncBaseTransport] = None, timeout: float = 10.0):
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)
        self.user: Optional[Dict[str, Any]] = None

    async def __aenter__(self) -> "QuizClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        response = await self._http.request(method, url, **kwargs)
        response.raise_for_status()
        return response

    async def login(self, username: str, password: str) -> Dict[str, Any]:
        data = (await self._request("POST", "/users/login", json={"username": username, "password": password})).json()
        self._http.headers["Authorization"] = f"Bearer {data['access_token']}"
        self.user = data["user"]
        return self.user

    async def get_quiz(self, quiz_id: int) -> Dict[str, Any]:
        return (await self._request("GET", f"/quizzes/{quiz_id}")).json()

    async def get_questions(self, quiz_id: int) -> List[Dict[str, Any]]:
        return (await self._request("GET", f"/questions/quiz/{quiz_id}")).json()

    async def get_options(self, question_id: int) -> List[Dict[str, Any]]:
        return (await self._request("GET", f"/questions/{question_id}/options")).json()

    async def start_or_resume(self, quiz_id: int, user_id: int) -> Dict[str, Any]:
        """Return ``{"submission_id", "resumed"}`` for the user's open attempt."""
        response = await self._http.post("/submissions", json={"quiz_id": quiz_id, "user_id": user_id})
        if response.status_code == 400 and "submission_id" in response.json():
            return {"submission_id": response.json()["submission_id"], "resumed": True}
        response.raise_for_status()
        return {"submission_id": response.json()["submission_id"], "resumed": False}

    async def saved_answers(self, submission_id: int) -> Dict[int, Dict[str, Any]]:
        """Latest saved answer per question id."""
        answers = (await self._request("GET", f"/submissions/{submission_id}/answers")).json()
        return {
            a["question_id"]: {"answer_text": a["answer_text"], "selected_option_id": a["selected_option_id"]}
            for a in answers
        }

    async def save_answer(
        self,
        submission_id: int,
        question_id: int,
        answer_text: Optional[str] = None,
        selected_option_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        payload = {"question_id": question_id, "answer_text": answer_text, "selected_option_id": selected_option_id}
        return (await self._request("POST", f"/submissions/{submission_id}/answers", json=payload)).json()

    async def complete(self, submission_id: int) -> Dict[str, Any]:
        return (await self._request("PUT", f"/submissions/{submission_id}/complete")).json()

    async def get_submission(self, submission_id: int) -> Dict[str, Any]:
        return (await self._request("GET", f"/submissions/{submission_id}")).json()


class QuizAttempt:
    def __init__(
        self,
        client: QuizClient,
        quiz: Dict[str, Any],
        questions: List[Dict[str, Any]],
        options: Dict[int, List[Dict[str, Any]]],
        submission_id: int,
        answers: Optional[Dict[int, Dict[str, Any]]] = None,
        resumed: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.quiz = quiz
        self.questions = questions
        self.options = options
        self.submission_id = submission_id
        self.answers = answers or {}
        self.resumed = resumed
        self.index = 0
        self.result: Optional[Dict[str, Any]] = None
        self._clock = clock
        limit = quiz.get("time_limit_minutes")
        self.deadline = clock() + limit * 60 if limit else None

    @classmethod
    async def begin(
        cls, client: QuizClient, quiz_id: int, user_id: int, clock: Callable[[], float] = time.monotonic
    ) -> "QuizAttempt":
        quiz = await client.get_quiz(quiz_id)
        questions = await client.get_questions(quiz_id)
        options = {
            q["question_id"]: await client.get_options(q["question_id"])
            for q in questions
            if q["question_type"] == "multiple_choice"
        }
        started = await client.start_or_resume(quiz_id, user_id)
        answers = await client.saved_answers(started["submission_id"]) if started["resumed"] else {}
        if started["resumed"]:
            logger.info(f"Resuming submission {started['submission_id']} with {len(answers)} saved answers")
        return cls(client, quiz, questions, options, started["submission_id"], answers, started["resumed"], clock)

    @property
    def current(self) -> Dict[str, Any]:
        return self.questions[self.index]

    @property
    def finished(self) -> bool:
        return self.result is not None

    def remaining_seconds(self) -> Optional[float]:
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - self._clock())

    @property
    def expired(self) -> bool:
        return self.deadline is not None and self._clock() >= self.deadline

    def next(self) -> bool:
        if self.index < len(self.questions) - 1:
            self.index += 1
            return True
        return False

    def previous(self) -> bool:
        if self.index > 0:
            self.index -= 1
            return True
        return False

    async def wait_for_input(self, read: Callable[[], Awaitable[str]]) -> Optional[str]:
        """Await ``read()`` until the deadline.

        Returns None once time runs out, after completing the attempt.
        """
        remaining = self.remaining_seconds()
        try:
            return await asyncio.wait_for(read(), timeout=remaining)
        except asyncio.TimeoutError:
            logger.info(f"Time limit reached for submission {self.submission_id}")
            await self.finish()
            return None

    async def answer(self, answer_text: Optional[str] = None, selected_option_id: Optional[int] = None) -> bool:
        """Save an answer to the current question.

        Returns False without saving when the time limit has passed; the attempt
        is completed instead.
        """
        if self.finished:
            return False
        if self.expired:
            await self.finish()
            return False
        question_id = self.current["question_id"]
        self.answers[question_id] = {"answer_text": answer_text, "selected_option_id": selected_option_id}
        await self.client.save_answer(self.submission_id, question_id, answer_text, selected_option_id)
        return True

    async def finish(self) -> Dict[str, Any]:
        if self.result is None:
            self.result = await self.client.complete(self.submission_id)
        return self.result
