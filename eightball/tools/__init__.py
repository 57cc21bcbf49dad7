from eightball.tools.community_directory import CommunityDirectory, RedditDirectory

__all__ = ["CommunityDirectory", "RedditDirectory"]
