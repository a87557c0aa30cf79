"""MCP stdio-based JSON-RPC server.

MCP (Model Context Protocol) 서버 구현
- stdio(표준 입출력) 기반 JSON-RPC 2.0 통신
- Claude Desktop 등 LLM 클라이언트와 통합
- 公众号 초안함 게시 도구(publish_article, list_themes, publish_image_message) 제공

주요 기능:
- initialize: 서버 초기화 및 capability 협상
- tools/list: 사용 가능한 도구 목록 제공
- tools/call: 도구 실행 및 결과 반환

통신 방식:
- 입력: stdin으로 JSON-RPC 요청 수신 (한 줄씩)
- 출력: stdout으로 JSON-RPC 응답 전송 (한 줄씩)
- 로그는 stderr로 출력 (stdout은 프로토콜 전용)

사용 예시:
    $ python -m wenyan_mcp.mcp.server
    (stdin) {"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}}
    (stdout) {"jsonrpc": "2.0", "id": 1, "result": {...}}
"""
import asyncio
import json
import logging
import sys
from typing import Any, Dict, Optional

from wenyan_mcp import __version__
from wenyan_mcp.mcp import tools
from wenyan_mcp.mcp.errors import (
    INTERNAL_ERROR,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    ToolError,
)
from wenyan_mcp.server.settings import settings

logger = logging.getLogger(__name__)

SERVER_NAME = "wenyan-mcp"
DEFAULT_PROTOCOL_VERSION = "2024-11-05"
HTTP_CLIENT_LOGGERS = ("httpx", "httpcore")


def _result(request_id: Any, result: Dict[str, Any]) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def _error(request_id: Any, code: int, message: str) -> Dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "error": {"code": code, "message": message},
    }


class MCPServer:
    """Stdio-based MCP JSON-RPC server.

    MCP 프로토콜을 구현하는 JSON-RPC 2.0 서버
    - 요청은 한 번에 하나씩 끝까지 처리
    - 툴 호출마다 새로운 상태로 실행 (호출 간 공유 상태 없음)
    """

    def __init__(self):
        self.initialized = False

    async def handle_request(self, request: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """JSON-RPC 요청을 처리하고 응답을 반환합니다.

        id가 없는 요청(notification)에는 응답하지 않으며 None을 반환합니다.

        JSON-RPC 에러 코드:
        - -32601: Method not found
        - -32602: Invalid params (알 수 없는 툴, 인자 검증 실패)
        - -32603: Internal error (툴 실행 실패)
        """
        method = request.get("method")
        params = request.get("params") or {}
        request_id = request.get("id")

        if "id" not in request:
            if method == "notifications/initialized":
                logger.info("Client finished initialization")
            return None

        try:
            # 메서드별 라우팅
            if method == "initialize":
                return await self.initialize(request_id, params)
            elif method == "ping":
                return _result(request_id, {})
            elif method == "tools/list":
                return await self.list_tools(request_id)
            elif method == "tools/call":
                return await self.call_tool(request_id, params)
            else:
                return _error(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")
        except Exception as e:
            logger.error(f"Error handling request: {e}")
            return _error(request_id, INTERNAL_ERROR, f"Internal error: {e}")

    async def initialize(self, request_id: Any, params: Dict[str, Any]) -> Dict[str, Any]:
        """서버 초기화 요청을 처리합니다.

        클라이언트가 보낸 protocolVersion을 그대로 돌려주고,
        tools capability만 광고합니다.
        """
        self.initialized = True
        logger.info("MCP server initialized")

        return _result(request_id, {
            "protocolVersion": params.get("protocolVersion") or DEFAULT_PROTOCOL_VERSION,
            "serverInfo": {
                "name": SERVER_NAME,
                "version": __version__,
            },
            "capabilities": {
                "tools": {},
            },
        })

    async def list_tools(self, request_id: Any) -> Dict[str, Any]:
        """사용 가능한 도구 목록을 반환합니다."""
        return _result(request_id, {"tools": tools.list_tools()})

    async def call_tool(self, request_id: Any, params: Dict[str, Any]) -> Dict[str, Any]:
        """도구 실행 요청을 처리합니다.

        처리 플로우:
        1. tool_name과 arguments 추출
        2. tools.call_tool()로 라우팅 및 실행
        3. 성공 시 content 블록 반환, ToolError는 해당 JSON-RPC 에러 코드로 변환
        """
        tool_name = params.get("name")
        arguments = params.get("arguments") or {}

        try:
            content = await tools.call_tool(tool_name, arguments)
        except ToolError as e:
            logger.error(f"Tool {tool_name} failed: {e.message}")
            return _error(request_id, e.code, e.message)
        except Exception as e:
            # 예상하지 못한 예외는 메시지만 전달 (스택 트레이스 제외)
            logger.exception(f"Unexpected error executing tool {tool_name}")
            return _error(request_id, INTERNAL_ERROR, f"Tool execution error: {e}")

        return _result(request_id, {"content": content})

    async def run(self):
        """stdio 기반 서버 루프를 실행합니다.

        루프 동작:
        1. stdin에서 한 줄 읽기
        2. JSON 파싱 (실패 시 -32700 응답)
        3. handle_request()로 처리
        4. 응답이 있으면 stdout으로 출력 후 flush

        종료 조건:
        - stdin EOF
        - KeyboardInterrupt (Ctrl+C)
        """
        logger.info("Starting MCP server on stdio")

        while True:
            try:
                # stdin에서 한 줄 읽기 (블로킹 작업이므로 executor 사용)
                line = await asyncio.get_event_loop().run_in_executor(
                    None, sys.stdin.readline
                )

                # EOF 확인 (연결 종료)
                if not line:
                    break
                if not line.strip():
                    continue

                try:
                    request = json.loads(line)
                except json.JSONDecodeError as e:
                    logger.error(f"JSON decode error: {e}")
                    self._write(_error(None, PARSE_ERROR, f"Parse error: {e}"))
                    continue

                response = await self.handle_request(request)
                if response is not None:
                    self._write(response)

            except KeyboardInterrupt:
                logger.info("Server interrupted")
                break
            except Exception as e:
                logger.error(f"Server error: {e}")

    @staticmethod
    def _write(message: Dict[str, Any]) -> None:
        sys.stdout.write(json.dumps(message, ensure_ascii=False) + "\n")
        sys.stdout.flush()


def configure_logging() -> None:
    # stdout은 JSON-RPC 전용이므로 로그는 stderr로
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    # httpx는 요청 URL(access_token, secret 쿼리 포함)을 INFO로 남김
    for name in HTTP_CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


async def main():
    """메인 엔트리 포인트.

    Claude Desktop 설정 (claude_desktop_config.json):
        {
          "mcpServers": {
            "wenyan-mcp": {
              "command": "wenyan-mcp",
              "env": {
                "WECHAT_APP_ID": "...",
                "WECHAT_APP_SECRET": "..."
              }
            }
          }
        }
    """
    server = MCPServer()
    await server.run()


def cli() -> None:
    """Console script entry point."""
    configure_logging()
    try:
        asyncio.run(main())
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    cli()
