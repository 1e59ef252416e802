#!/usr/bin/env python3
"""
Interactive Test Client for AOF-KV

A simple command-line client for manually testing the AOF-KV server.
Each typed line is split on whitespace and sent as one frame of bulk
strings; the raw response line is printed back.

Usage:
    python scripts/client.py                  # Connect to localhost:6379
    python scripts/client.py --host 1.2.3.4   # Connect to specific host
    python scripts/client.py --port 8080      # Connect to specific port

Commands (case-sensitive):
    PING [arg ...]           - Liveness check, echoes arguments
    SET <key> <value>        - Store a string
    GET <key>                - Retrieve a string
    HSET <map> <field> <v>   - Store a field in a hash map
    HGET <map> <field>       - Retrieve a field from a hash map
    help                     - Show this help
    exit                     - Exit client
"""

import argparse
import socket
import sys

# Enable command history with arrow keys (works on Unix systems)
try:
    import readline  # noqa: F401
except ImportError:
    pass  # readline not available on Windows by default

from aofkv.protocol.encoder import encode_command


class AOFKVClient:
    """Simple TCP client for AOF-KV."""

    def __init__(self, host: str, port: int, timeout: float = 5.0):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.socket = None

    def connect(self) -> bool:
        """Connect to the server."""
        try:
            self.socket = socket.create_connection((self.host, self.port), timeout=self.timeout)
            return True
        except OSError as e:
            print(f"Connection error: {e}")
            return False

    def disconnect(self):
        """Disconnect from the server."""
        if self.socket:
            try:
                self.socket.close()
            except OSError:
                pass
            self.socket = None

    def send_command(self, *args: str) -> str:
        """Encode and send a command, returning the raw response line."""
        if not self.socket:
            return "ERROR: Not connected"

        try:
            frame = encode_command(*args)
        except ValueError as e:
            return f"ERROR: {e}"

        try:
            self.socket.sendall(frame)

            response = b''
            while not response.endswith(b'\r\n'):
                chunk = self.socket.recv(4096)
                if not chunk:
                    return "ERROR: Connection closed by server"
                response += chunk

            return response.decode('utf-8').rstrip('\r\n')

        except socket.timeout:
            return "ERROR: Request timed out"
        except OSError as e:
            return f"ERROR: {e}"

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()


def print_help():
    """Print help message."""
    print("""
AOF-KV Commands:
----------------
  PING [arg ...]            Liveness check
  SET <key> <value>         Store a string (logged)
  GET <key>                 Retrieve a string ("_" when absent)
  HSET <map> <field> <v>    Store a hash field (logged)
  HGET <map> <field>        Retrieve a hash field ("_" when absent)

  At most 9 words per command, each at most 9 bytes long.

Client Commands:
----------------
  help                      Show this help message
  exit                      Exit the client
  reconnect                 Reconnect to the server
  status                    Show connection status
""")


def main():
    parser = argparse.ArgumentParser(
        description="Interactive test client for AOF-KV"
    )
    parser.add_argument(
        "--host",
        type=str,
        default="localhost",
        help="Server host (default: localhost)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=6379,
        help="Server port (default: 6379)"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=5.0,
        help="Socket timeout in seconds (default: 5.0)"
    )

    args = parser.parse_args()

    print("AOF-KV Client")
    print("=============")
    print(f"Connecting to {args.host}:{args.port}...")

    client = AOFKVClient(args.host, args.port, args.timeout)

    if not client.connect():
        print("Failed to connect. Is the server running?")
        print(f"  Try: python -m aofkv.server --port {args.port}")
        sys.exit(1)

    print("Connected! Type 'help' for commands.\n")

    try:
        while True:
            try:
                command = input(">>> ").strip()

                if not command:
                    continue

                lower_cmd = command.lower()

                if lower_cmd == "help":
                    print_help()
                    continue

                if lower_cmd in ("exit", "quit"):
                    print("Goodbye!")
                    break

                if lower_cmd == "reconnect":
                    client.disconnect()
                    if client.connect():
                        print("Reconnected!")
                    else:
                        print("Reconnection failed.")
                    continue

                if lower_cmd == "status":
                    status = "Connected" if client.socket else "Disconnected"
                    print(f"Status: {status}")
                    print(f"Server: {args.host}:{args.port}")
                    continue

                print(client.send_command(*command.split()))

            except EOFError:
                print("\nGoodbye!")
                break

    except KeyboardInterrupt:
        print("\n\nInterrupted. Goodbye!")
    finally:
        client.disconnect()


if __name__ == "__main__":
    main()
