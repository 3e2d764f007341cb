import argparse
import asyncio
import sys

from quizapp.client import QuizAttempt, QuizClient


def render(attempt: QuizAttempt) -> None:
    question = attempt.current
    remaining = attempt.remaining_seconds()
    clock = f" [{int(remaining) // 60}:{int(remaining) % 60:02d} left]" if remaining is not None else ""
    print(f"\nQuestion {attempt.index + 1}/{len(attempt.questions)} ({question['points']} pts){clock}")
    print(question["question_text"])
    for number, option in enumerate(attempt.options.get(question["question_id"], []), start=1):
        print(f"  {number}. {option['option_text']}")
    saved = attempt.answers.get(question["question_id"])
    if saved:
        print(f"  (saved: {saved['answer_text'] or saved['selected_option_id']})")


async def open_stdin() -> asyncio.StreamReader:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)
    return reader


async def take_quiz(client: QuizClient, username: str, password: str, quiz_id: int) -> dict:
    user = await client.login(username, password)
    attempt = await QuizAttempt.begin(client, quiz_id, user["user_id"])
    print(f"{attempt.quiz['title']}" + (" (resumed)" if attempt.resumed else ""))
    if not attempt.questions:
        print("This quiz has no questions.")
    stdin = await open_stdin() if attempt.questions else None

    async def read_reply() -> str:
        print("answer, 'p' previous, 's' submit > ", end="", flush=True)
        return (await stdin.readline()).decode()

    while attempt.questions and not attempt.finished:
        if attempt.expired:
            print("Time is up! Submitting your quiz...")
            break
        render(attempt)
        reply = await attempt.wait_for_input(read_reply)
        if reply is None:
            print("\nTime is up! Your quiz was submitted.")
            break
        if not reply:
            # stdin closed
            break
        reply = reply.strip()
        if reply == "s":
            break
        if reply == "p":
            attempt.previous()
            continue
        if reply:
            options = attempt.options.get(attempt.current["question_id"])
            if options:
                if not reply.isdigit() or not 1 <= int(reply) <= len(options):
                    print("Pick one of the listed option numbers")
                    continue
                saved = await attempt.answer(selected_option_id=options[int(reply) - 1]["option_id"])
            else:
                saved = await attempt.answer(answer_text=reply)
            if not saved:
                break
        if not attempt.next():
            print("That was the last question; 's' submits, 'p' goes back.")

    result = await attempt.finish()
    verdict = "Passed" if result["passed"] else "Failed"
    print(f"\nScore: {result['score']}/{result['total_points']} ({result['percentage']}%) {verdict}")
    return result


async def run(args: argparse.Namespace) -> None:
    async with QuizClient(args.base_url) as client:
        await take_quiz(client, args.username, args.password, args.quiz_id)


def main() -> None:
    parser = argparse.ArgumentParser(description="Take a quiz from the terminal")
    parser.add_argument("quiz_id", type=int)
    parser.add_argument("--base-url", default="http://localhost:5000")
    parser.add_argument("--username", required=True)
    parser.add_argument("--password", required=True)
    args = parser.parse_args()
    asyncio.run(run(args))


if __name__ == "__main__":
    main()
