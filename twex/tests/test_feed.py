from fastapi.testclient import TestClient


def test_feed_pages_newest_first(client: TestClient, register, make_posts):
    """Eleven posts split into a full page and a single-item page"""
    author = register("prolific")
    post_ids = make_posts(author, 11)

    first = client.get("/api/posts?page=1", headers=author.headers).json()
    second = client.get("/api/posts?page=2", headers=author.headers).json()
    third = client.get("/api/posts?page=3", headers=author.headers).json()

    assert [p["id"] for p in first] == list(reversed(post_ids))[:10]
    assert [p["id"] for p in second] == [post_ids[0]]
    assert third == []


def test_feed_exact_page_then_empty(client: TestClient, register, make_posts):
    author = register("tenposts")
    make_posts(author, 10)

    assert len(client.get("/api/posts?page=1", headers=author.headers).json()) == 10
    assert client.get("/api/posts?page=2", headers=author.headers).json() == []


def test_feed_defaults_to_first_page(client: TestClient, register, make_posts):
    author = register("defaults")
    make_posts(author, 3)

    response = client.get("/api/posts", headers=author.headers)

    assert response.status_code == 200
    assert len(response.json()) == 3


def test_feed_rejects_page_zero(client: TestClient, register):
    user = register("pagezero")

    assert client.get("/api/posts?page=0", headers=user.headers).status_code == 422


def test_feed_counts_and_viewer_flags(client: TestClient, register, make_post):
    """Scenario: two likers, one bookmark, one reply"""
    alice = register("alice")
    bob = register("bob")
    post_id = make_post(alice, "counted")

    client.post(f"/api/like/{post_id}", headers=alice.headers)
    client.post(f"/api/like/{post_id}", headers=bob.headers)
    client.post(f"/api/bookmark/{post_id}", headers=bob.headers)
    client.post("/api/replies", data={"reply_to": post_id, "content": "hi"}, headers=bob.headers)

    as_alice = client.get("/api/posts", headers=alice.headers).json()[0]
    as_bob = client.get("/api/posts", headers=bob.headers).json()[0]

    assert as_alice["total_likes"] == 2
    assert as_alice["total_replies"] == 1
    assert as_alice["liked_by_current_user"] is True
    assert as_alice["bookmarked_by_current_user"] is False
    assert as_bob["liked_by_current_user"] is True
    assert as_bob["bookmarked_by_current_user"] is True


def test_unlike_visible_on_next_fetch(client: TestClient, register, make_post):
    alice = register("alice")
    post_id = make_post(alice)

    client.post(f"/api/like/{post_id}", headers=alice.headers)
    assert client.get("/api/posts", headers=alice.headers).json()[0]["total_likes"] == 1

    client.delete(f"/api/unlike/{post_id}", headers=alice.headers)
    post = client.get("/api/posts", headers=alice.headers).json()[0]
    assert post["total_likes"] == 0
    assert post["liked_by_current_user"] is False


def test_following_feed(client: TestClient, register, make_post):
    reader = register("reader")
    followed = register("followed")
    stranger = register("stranger")
    followed_post = make_post(followed, "from followed")
    make_post(stranger, "from stranger")
    make_post(reader, "my own")

    client.post(f"/api/follow/{followed.id}", headers=reader.headers)

    following = client.get("/api/posts?type=following", headers=reader.headers).json()
    everything = client.get("/api/posts?type=all", headers=reader.headers).json()

    assert [p["id"] for p in following] == [followed_post]
    assert len(everything) == 3

    client.delete(f"/api/unfollow/{followed.id}", headers=reader.headers)
    assert client.get("/api/posts?type=following", headers=reader.headers).json() == []


def test_following_feed_empty_without_follows(client: TestClient, register, make_post):
    loner = register("loner")
    make_post(loner)

    assert client.get("/api/posts?type=following", headers=loner.headers).json() == []


def test_unknown_feed_type_reads_as_all(client: TestClient, register, make_posts):
    user = register("typo")
    make_posts(user, 2)

    response = client.get("/api/posts?type=trending", headers=user.headers)

    assert response.status_code == 200
    assert len(response.json()) == 2


def test_user_posts_flags_from_viewer(client: TestClient, register, make_post):
    author = register("author")
    viewer = register("viewer")
    post_id = make_post(author)
    make_post(viewer)

    client.post(f"/api/like/{post_id}", headers=viewer.headers)

    as_viewer = client.get(f"/api/users/{author.id}/posts", headers=viewer.headers).json()
    as_author = client.get(f"/api/users/{author.id}/posts", headers=author.headers).json()

    assert [p["id"] for p in as_viewer] == [post_id]
    assert as_viewer[0]["liked_by_current_user"] is True
    assert as_author[0]["liked_by_current_user"] is False


def test_user_likes_ordered_by_post_date(client: TestClient, register, make_post):
    author = register("author")
    liker = register("liker")
    older = make_post(author, "older")
    newer = make_post(author, "newer")
    make_post(author, "unliked")

    # Liking the newer post first; ordering follows the posts, not the likes
    client.post(f"/api/like/{newer}", headers=liker.headers)
    client.post(f"/api/like/{older}", headers=liker.headers)

    likes = client.get(f"/api/users/{liker.id}/likes", headers=author.headers).json()

    assert [p["id"] for p in likes] == [newer, older]
    assert all(p["liked_by_current_user"] is False for p in likes)


def test_user_replies_include_parent_post(client: TestClient, register, make_post):
    author = register("author")
    replier = register("replier")
    first_post = make_post(author, "first")
    second_post = make_post(author, "second")

    client.post("/api/replies", data={"reply_to": first_post, "content": "re first"}, headers=replier.headers)
    client.post("/api/replies", data={"reply_to": second_post, "content": "re second"}, headers=replier.headers)

    replies = client.get(f"/api/users/{replier.id}/replies", headers=author.headers).json()

    assert [r["content"] for r in replies] == ["re second", "re first"]
    assert replies[0]["username"] == "replier"
    assert replies[0]["post"]["id"] == second_post
    assert replies[0]["post"]["content"] == "second"
    assert replies[0]["post"]["username"] == "author"


def test_bookmarks_listing(client: TestClient, register, make_post):
    """Scenario: bookmark, list, unbookmark, list"""
    author = register("author")
    reader = register("reader")
    kept = make_post(author, "keep")
    dropped = make_post(author, "drop")

    client.post(f"/api/bookmark/{kept}", headers=reader.headers)
    client.post(f"/api/bookmark/{dropped}", headers=reader.headers)

    bookmarks = client.get("/api/bookmarks", headers=reader.headers).json()
    assert [p["id"] for p in bookmarks] == [dropped, kept]
    assert all(p["bookmarked_by_current_user"] for p in bookmarks)

    client.delete(f"/api/unbookmark/{dropped}", headers=reader.headers)

    bookmarks = client.get("/api/bookmarks", headers=reader.headers).json()
    assert [p["id"] for p in bookmarks] == [kept]
    assert client.get("/api/bookmarks", headers=author.headers).json() == []
