"""Test fixtures and configuration."""

import pytest
from bs4 import BeautifulSoup

from forumwatch.config import Config
from forumwatch.errors import FetchError

BASE_URL = "http://forum.example.com/"
PROFILE_URL = BASE_URL + "member.php?u=3"
SEARCH_URL = BASE_URL + "search.php?do=finduser&u=3"
THREAD_URL = BASE_URL + "showthread.php?p=123"

PROFILE_HTML = """
<html>
<body>
<div id="username_box">
    <h1>
        Kalcor
    </h1>
</div>
<div id="collapseobj_stats">
    <div class="alt1">
        <fieldset class="statistics_group">
            <legend>Total Posts</legend>
            <ul>
                <li>Total Posts: 12,345</li>
                <li>Posts Per Day: 2.31</li>
            </ul>
        </fieldset>
        <fieldset class="statistics_group">
            <legend>General Information</legend>
            <ul>
                <li>Last Activity: Today 10:00</li>
                <li>Join Date: 01-01-2006</li>
            </ul>
        </fieldset>
    </div>
</div>
<div id="collapseobj_aboutme">
    <div class="alt1">
        <ul class="profilefield_list">
            <li>
                <dl>
                    <dt>Biography</dt>
                    <dd>  Runs the servers.
Writes the code.  </dd>
                </dl>
            </li>
        </ul>
    </div>
</div>
<ol id="message_list">
    <li id="vmessage_4">
        <div class="avatar"></div>
        <div class="content">
            <div class="info"><div class="username"><a href="member.php?u=7">Alice</a></div></div>
            <div class="body">First message</div>
        </div>
    </li>
    <li id="vmessage_3">
        <div class="avatar"></div>
        <div class="content">
            <div class="info"></div>
            <div class="body">Message without an author</div>
        </div>
    </li>
    <li id="vmessage_2">
        <div class="avatar"></div>
        <div class="content">
            <div class="info"><div class="username"><a href="member.php?u=9">Bob</a></div></div>
        </div>
    </li>
    <li id="vmessage_1">
        <div class="avatar"></div>
        <div class="content">
            <div class="info"><div class="username"><a href="member.php?u=8">Carol</a></div></div>
            <div class="body">Second message</div>
        </div>
    </li>
</ol>
</body>
</html>
"""

BARE_PROFILE_HTML = """
<html>
<body>
<div id="username_box"><h1>Kalcor</h1></div>
</body>
</html>
"""

NOT_A_PROFILE_HTML = """
<html>
<body>
<div class="standard_error">This user has not registered and therefore does not have a profile to view.</div>
</body>
</html>
"""

SEARCH_HTML = """
<html>
<body>
<table>
    <tr>
        <td class="alt1">
            <div class="alt2"><div><em><a href="showthread.php?p=123#post123">SA-MP 0.3.7 R2 released</a></em></div></div>
        </td>
    </tr>
    <tr>
        <td class="alt1">
            <div class="alt2"><div><em><a href="showthread.php?p=99#post99">Older topic</a></em></div></div>
        </td>
    </tr>
</table>
</body>
</html>
"""

THREAD_HTML = """
<html>
<body>
<table id="post120">
    <tr valign="top">
        <td class="alt2">
            <div>
                <div>Reputation: 5</div>
            </div>
        </td>
        <td class="alt1"><div id="post_message_120">Someone else's post</div></td>
    </tr>
</table>
<table id="post123">
    <tr valign="top">
        <td class="alt2">
            <div>Join Date: Jan 2006</div>
            <div>
                <div>Posts: 12,345</div>
                <div>Reputation: 1,024</div>
            </div>
        </td>
        <td class="alt1">
            <div id="post_message_123">
                Hello everyone,
                the new version is out.
            </div>
        </td>
    </tr>
</table>
</body>
</html>
"""


class FakeFetcher:
    """DocumentFetcher stand-in serving canned pages by URL."""

    def __init__(self, pages, config=None):
        self.pages = dict(pages)
        self.config = config or Config(base_url=BASE_URL)
        self.requested = []

    async def fetch(self, url):
        self.requested.append(url)
        if url not in self.pages:
            raise FetchError(f"HTTP 404 for {url}", url=url, status=404)
        return BeautifulSoup(self.pages[url], 'html.parser')

    async def close(self):
        pass


@pytest.fixture
def config():
    return Config(base_url=BASE_URL)


@pytest.fixture
def profile_root():
    return BeautifulSoup(PROFILE_HTML, 'html.parser')


@pytest.fixture
def bare_profile_root():
    return BeautifulSoup(BARE_PROFILE_HTML, 'html.parser')


@pytest.fixture
def make_fetcher(config):
    """Build a FakeFetcher from a URL -> HTML mapping."""
    def _make(pages):
        return FakeFetcher(pages, config)
    return _make


@pytest.fixture
def full_site():
    return {
        PROFILE_URL: PROFILE_HTML,
        SEARCH_URL: SEARCH_HTML,
        THREAD_URL: THREAD_HTML,
    }
