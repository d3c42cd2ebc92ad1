"""
Example showing route model binding with scoped parameters and plugins.
"""

from __future__ import annotations

import asyncio

from smartbind import (
    ArgumentResolver,
    BindableController,
    ResourceLoader,
    ResourceMap,
    Route,
    bind,
)


class HttpContext:
    def __init__(self) -> None:
        self.resources = ResourceMap()


class Post:
    def __init__(self, slug: str) -> None:
        self.slug = slug
        self.comments = {"1": Comment("1", self), "2": Comment("2", self)}


class Comment:
    def __init__(self, ident: str, post: Post) -> None:
        self.ident = ident
        self.post = post


POSTS = {"hello-world": Post("hello-world")}


class CommentsController(BindableController):
    @bind(HttpContext, Post, Comment)
    def show(self, ctx, post, comment):
        return f"comment {comment.ident} on {post.slug}"


def find(param, value, parent):
    if param.name == "post":
        return POSTS.get(value)
    return parent.comments.get(value)


ROUTE = Route(
    "/posts/:post(slug)/comments/:>comment",
    (CommentsController, "show"),
).prepare()


async def dispatch(values: dict) -> str:
    ctx = HttpContext()
    matched = ROUTE.match(values)
    await ResourceLoader(find).load(matched, ctx.resources)
    resolver = ArgumentResolver().plug("logging")
    args = await resolver.resolve_arguments(ctx, matched)
    return CommentsController().show(*args)


if __name__ == "__main__":
    print(asyncio.run(dispatch({"post": "hello-world", "comment": "2"})))
