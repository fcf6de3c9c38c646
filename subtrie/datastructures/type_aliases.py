"""
Semantic type aliases for subtrie datastructures.

Replaces raw ``str``/``int`` annotations with names that say what the value
means inside the subscription index.
"""

# Identity types
type ClientId = str

# Topic types
type TopicName = str  # Concrete publish topic (e.g., "sport/tennis/player1")
type TopicFilter = str  # Subscription filter, may carry wildcards
type LevelName = str  # One "/"-delimited level of a topic

# Counting types
type SubscriptionCount = int
type NodeCount = int
type TrieDepth = int
type LevelIndex = int
