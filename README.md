# ybbs

This package holds the data layer and content helpers for a small bulletin board.
Topics, comments, users, nodes (categories), tags, links and site settings are
stored in a key-value store that keeps hash tables and sorted sets in SQLite.
Lists built from the store are kept in a bounded in-memory cache.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

### Storage and caching

- `ybbs.store`: `Store(path)` opens or creates `store.sqlite3` inside the
  directory `path`. Pass `":memory:"` to keep the data in memory instead.
  - Hash tables: `hget`, `hset`, `hmset`, `hdel`, `hincr`, `hget_int`,
    `hmget`, `hscan`, `hrscan`.
  - Sorted sets: `zset`, `zget`, `zdel`, `zincr`, `zscan`, `zrscan`.
  - Keys are ordered bytewise.
  - Counters from `hincr` and `zincr` never fall below zero.
  - `i2b` and `b2i` convert unsigned 64-bit integers to and from 8-byte
    big-endian keys.
  - `Store` is a context manager.
- `ybbs.cache`: `Cache(max_bytes)` is a thread-safe byte cache. When it is
  full, it evicts the least recently used entry first.
  - `obj_cached_set` stores text and bytes as they are. Other values, such as
    dataclasses, lists and dicts, are stored as JSON.
  - `obj_cached_get` returns the decoded JSON value, or the raw bytes when
    `raw=True`.
- `ybbs.state`: `AppState` and the shared `STATE` instance. It holds the rate
  limits, the bad and allowed IP prefixes, the blocked bot names and the map of
  logged-in users.
  - `sync_dict` makes one dict equal to another in place.
- `ybbs.safeslice`: `SafeStrList`, a thread-safe list of strings.
  - Prefix matching: `item_in_prefix`.
  - Wrap-around lookup: `mod_get`.
  - Whole-list replacement: `replace`.

### Configuration and records

- `ybbs.const`: table names, setting keys, `TIME_OFFSET` (8 hours) and
  `setting_keys()`.
- `ybbs.config`: `MainConf` and `SiteConf`.
  - `SiteConf.to_json` and `SiteConf.from_json` convert the configuration to
    and from JSON.
  - `site_conf_load(db)` returns the stored site configuration. If none is
    stored, it writes the defaults first and returns them.
  - `conf_load_to_state(db)` copies the rate limits into `STATE`.
- `ybbs.setting`: `setting_get_by_key`, `setting_get_by_keys`, and
  `update_bad_bot_name`, `update_bad_ip_prefix` and `update_allow_ip_prefix`.
  The three update functions refresh `STATE` from the stored
  comma-separated settings.
- `ybbs.records`: small dataclasses. `Msg`, `EmailInfo`, `Mp3Info`,
  `AuthInfo` and a few others are defined here. The module also has
  `msg_check_has_one`, `email_info_update` and `mp3_info_set`.
- `ybbs.user`:
  - `UserFlag`, `User`, `UserFmt`.
  - Lookups by name, id, list of ids or keyword.
  - `user_get_names_by_ids`, with a process-wide name cache.
  - `user_set` and `user_get_all_admin`.
- `ybbs.node`: `Node`, `node_set`, `node_get_by_id`, `node_get_all` and
  `node_get_names_by_ids`.
- `ybbs.link`: `Link`, `link_get_by_id`, `link_set` and `link_list`.
  `link_list` returns links sorted by descending score.
- `ybbs.tag`: `TagFontSize` and `get_tags_for_side`.
- `ybbs.custom_router`: `CustomRouter` with get-all, set and get-by-key.
- `ybbs.ipinfo`: `IpInfo` and `ip_info_get_by_key_start`.

### Topics and comments

- `ybbs.topic`: `Topic` and its list, detail and feed variants.
  - `topic_add` assigns the next id. It records the topic on the home, node
    and user timelines and in the node archive.
  - `topic_del` removes the topic, its timeline entries and its tag
    references.
  - Also here: `topic_get_relative`, the review queue helpers, the feed helper
    and `article_get_nearby`.
- `ybbs.comment`: `Comment`, `CommentFmt` and `CommentReview`.
  - `comment_add` stores the comment, moves the topic up its timelines and
    sends a `Msg` notice to the topic author and to `@`-mentioned users.
  - Also here: `get_all_topic_comment`, `comment_get_recent` and the review
    queue helpers.
- `ybbs.topic_list`: paged listings.
  - `get_topic_list` pages through sorted timelines.
  - `get_topic_list_archives` pages through archive tables.
  - `search_topic_list` searches titles, or contents with a `c:` prefix.
  - `get_msg_topic_list` lists the topics a user was notified about.
- `ybbs.siteinfo`: `SiteInfo` and `get_site_info`.
  - It returns the counters, the site age and the current ISO week.
  - On a site with no nodes it also creates a default node and link.

### Content and utilities

- `ybbs.content`:
  - `content_fmt` renders Markdown (CommonMark with tables and
    strikethrough) to HTML.
    - Fenced code is highlighted with Pygments, with line numbers.
    - Bare image URLs become images, and bare URLs become links.
    - `@name` becomes a link to `/name/<name>`.
    - External links get `rel="nofollow" target="_blank"`.
  - Text helpers: `get_desc`, `get_short_con`, `get_public_con`,
    `get_mention`.
  - Image helpers: `find_all_img_in_content`, `count_all_img_in_content`.
  - Highlighting helpers: `color_code`, `trim_pre_tag`, `has_code_block`.
- `ybbs.timefmt`:
  - `time_fmt` formats timestamps in UTC with strftime layouts.
  - `time_human` describes ages in Chinese, for example `3分钟前`.
  - `get_time_unicode_clock` returns the HTML entity of a clock-face emoji.
  - `get_cntm` returns the current time shifted by the offset.
- `ybbs.common`: `md5`, `xxhash64`, `get_domain_from_url`, `slice_uniq_str`,
  `ip_trim_right_dot` and `ten_to_62`.
- `ybbs.textcheck`: `is_nickname` and `remove_character`.
- `ybbs.password`: `rand_string(n)`.
- `ybbs.ostool`: `auto_create_dir`, `cmd_exists`, `find_in_ps` and
  `hash_file`. `find_in_ps` runs `ps -ef | grep`.
- `ybbs.imagetool`:
  - `check_image_type` recognises JPEG, GIF and PNG.
  - `get_image_obj` decodes those formats with Pillow.
  - `image_resize` does a Lanczos resize.

### Page models

- `ybbs.jsonld`: JSON-LD records (`JsArticle`, `JsComment`, `JsonLd`, …).
  - `jsonld_dict` converts a record to a plain JSON value.
  - `jsonld_dumps` returns JSON that is safe to embed in HTML.
- `ybbs.pages`: view models for page templates: `BasePage`, `TopicLstPage`,
  `TopicDetailPage`, `AdminBasePage` and `NormalRsp`.

## Example

```python
from ybbs.cache import Cache
from ybbs.content import content_fmt
from ybbs.store import Store
from ybbs.topic import Topic, topic_add, topic_get_by_id

mc = Cache(5 * 1024 * 1024)
with Store("bbs-data") as db:
    topic = topic_add(mc, db, Topic(node_id=1, user_id=1, title="Hello",
                                    content="First post", add_time=1700000000))
    print(topic_get_by_id(db, topic.id).title)

print(content_fmt("Some **bold** text, hi @alice"))
```

## What this package does not do

This package has no web server, no HTTP routes or request handlers, and no
page templates. It provides no command to run.

It also does not handle:

- sign-in, sessions or cookies
- third-party login
- rate limiting of requests
- avatar generation
- file uploads
- sending mail
- background jobs such as tag indexing or backups

It gives you the storage, the data records and the content formatting that
such parts would build on.