"""
CarePay Draft Pay Engine - MCP Server

FastMCP server exposing payroll calculation tools:
- Surcharge split of an intervention
- Paid transport between two events
"""

import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Importing the tool module registers the tools on the MCP instance
from engines.tools.draft_pay import mcp  # noqa: E402


def main():
    """Run the MCP server."""
    logger.info(f"Starting {mcp.name} MCP Server")
    mcp.run()


if __name__ == "__main__":
    main()
