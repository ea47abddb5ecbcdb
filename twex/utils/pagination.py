from typing import Tuple


def page_window(page: int, page_size: int) -> Tuple[int, int]:
    """
    Translate a 1-based page number into (offset, limit).

    Listings never report a total; a page shorter than `page_size` tells the
    client there is nothing left to fetch.
    """
    page = max(page, 1)
    return (page - 1) * page_size, page_size
