"""FastMCP server relaying control-panel requests to the job filter."""

from typing import List, Optional

from fastmcp import Context, FastMCP
from mcp_server.tools import filtering, navigation

# Create MCP server
mcp = FastMCP("job-filter")


# Register navigation tools
@mcp.tool()
async def browser_launch(
    headless: bool = False,
    viewport_width: int = 1920,
    viewport_height: int = 1080
) -> str:
    """Launch Chromium with the job filter attached. Call this before any other tool.

    Args:
        headless: Run browser in headless mode (no UI)
        viewport_width: Browser viewport width in pixels
        viewport_height: Browser viewport height in pixels
    """
    return await navigation.browser_launch({
        "headless": headless,
        "viewport_width": viewport_width,
        "viewport_height": viewport_height
    })


@mcp.tool()
async def navigate(url: str, wait_until: str = "domcontentloaded") -> str:
    """Navigate the filtered page to a URL, usually a job search.

    Args:
        url: The URL to navigate to
        wait_until: When to consider navigation complete (load, domcontentloaded, networkidle)
    """
    return await navigation.navigate({"url": url, "wait_until": wait_until})


@mcp.tool()
async def browser_close() -> str:
    """Close the browser and cleanup resources."""
    return await navigation.browser_close({})


# Register filter tools
@mcp.tool()
async def update_settings(
    promoted_filter_enabled: Optional[bool] = None,
    blocked_company_names: Optional[List[str]] = None,
    visibility_mode: Optional[str] = None,
) -> str:
    """Change the filter rules. Omitted fields keep their current value.

    Previously hidden jobs are restored first, so relaxed rules take effect
    without reloading the page.

    Args:
        promoted_filter_enabled: Hide jobs labelled "Promoted"
        blocked_company_names: Full list of blocked company names (substring match)
        visibility_mode: "remove" to drop hidden jobs from the list, "dim" to grey them out
    """
    args = {}
    if promoted_filter_enabled is not None:
        args["promoted_filter_enabled"] = promoted_filter_enabled
    if blocked_company_names is not None:
        args["blocked_company_names"] = blocked_company_names
    if visibility_mode is not None:
        args["visibility_mode"] = visibility_mode
    return await filtering.update_settings(args)


@mcp.tool()
async def scan_all_jobs(ctx: Context) -> str:
    """Scroll through the whole results list and filter every job.

    The list renders jobs lazily, so the scan scrolls step by step until the
    job count stops changing. Progress is reported per scroll step.
    """
    async def report(total_items: int, iteration: int) -> None:
        await ctx.report_progress(progress=iteration + 1)
        await ctx.info(f"Found {total_items} jobs (scroll {iteration})")

    return await filtering.scan_all_jobs({}, report_progress=report)


@mcp.tool()
async def get_status() -> str:
    """Get the hidden job count, whether a scan is running, and the active settings."""
    return await filtering.get_status({})


@mcp.tool()
async def add_blocked_company(name: str) -> str:
    """Block a company. Jobs whose company name contains it are hidden.

    Args:
        name: Company name (matched case-insensitively as a substring)
    """
    return await filtering.add_blocked_company({"name": name})


@mcp.tool()
async def remove_blocked_company(name: str) -> str:
    """Unblock a company and restore its jobs.

    Args:
        name: Company name exactly as it was added
    """
    return await filtering.remove_blocked_company({"name": name})


# Run the server
if __name__ == "__main__":
    mcp.run()
