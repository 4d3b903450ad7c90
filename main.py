"""
Scratch 客户端命令行入口

示例:
    python main.py user griffpatch
    python main.py followers griffpatch --limit 20
    python main.py project 10128407
    python main.py login --session-file .scratchSession
"""

import argparse
import asyncio
import logging
import sys

from scratch_client.core.config import settings
from scratch_client.core.errors import ScratchError
from scratch_client.scratch import Scratch

logger = logging.getLogger(__name__)


async def show_user(scratch: Scratch, args: argparse.Namespace) -> None:
    user = scratch.get_user(args.username)
    print(f"username : {await user.get_username()}")
    print(f"id       : {await user.get_id()}")
    print(f"joined   : {await user.get_join_date()}")
    print(f"country  : {await user.get_country()}")
    print(f"status   : {await user.get_status()}")
    print(f"bio      : {await user.get_bio()}")


async def show_project(scratch: Scratch, args: argparse.Namespace) -> None:
    project = scratch.get_project(args.project_id)
    print(f"id     : {await project.get_id()}")
    print(f"title  : {await project.get_title()}")
    print(f"author : {await project.get_author()}")


async def list_users(scratch: Scratch, args: argparse.Namespace) -> None:
    user = scratch.get_user(args.username)
    if args.command == "followers":
        stream = user.get_followers()
    else:
        stream = user.get_following()
    for other in await stream.collect(limit=args.limit):
        print(await other.get_username())


async def list_projects(scratch: Scratch, args: argparse.Namespace) -> None:
    user = scratch.get_user(args.username)
    for project in await user.get_shared_projects().collect(limit=args.limit):
        print(f"{await project.get_id()}\t{await project.get_title()}")


async def login(scratch: Scratch, args: argparse.Namespace) -> None:
    if settings.SCRATCH_USERNAME and settings.SCRATCH_PASSWORD:
        session = await scratch.login(settings.SCRATCH_USERNAME, settings.SCRATCH_PASSWORD)
    else:
        session = await scratch.login_or_restore(args.session_file)
    print(f"Logged in as {session.username}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Scratch API client")
    parser.add_argument("-v", "--verbose", action="store_true", help="输出 DEBUG 日志")
    subparsers = parser.add_subparsers(dest="command", required=True)

    user_parser = subparsers.add_parser("user", help="显示用户资料")
    user_parser.add_argument("username")
    user_parser.set_defaults(handler=show_user)

    for name in ("followers", "following"):
        sub = subparsers.add_parser(name, help=f"列出 {name}")
        sub.add_argument("username")
        sub.add_argument("--limit", type=int, default=None)
        sub.set_defaults(handler=list_users)

    projects_parser = subparsers.add_parser("projects", help="列出用户分享的项目")
    projects_parser.add_argument("username")
    projects_parser.add_argument("--limit", type=int, default=None)
    projects_parser.set_defaults(handler=list_projects)

    project_parser = subparsers.add_parser("project", help="显示项目详情")
    project_parser.add_argument("project_id", type=int)
    project_parser.set_defaults(handler=show_project)

    login_parser = subparsers.add_parser("login", help="登录并保存会话")
    login_parser.add_argument("--session-file", default=settings.SCRATCH_SESSION_FILE)
    login_parser.set_defaults(handler=login)

    return parser


async def run(args: argparse.Namespace) -> int:
    scratch = Scratch()
    try:
        await args.handler(scratch, args)
    except ScratchError as e:
        logger.error("%s failed: %s", args.command, e)
        return 1
    finally:
        await scratch.close()
    return 0


def main(argv=None) -> int:
    """主入口"""
    args = build_parser().parse_args(argv)

    # 日志输出到 stderr，避免干扰 stdout 上的结果
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
