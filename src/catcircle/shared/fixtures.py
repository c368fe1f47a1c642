"""Seed data written to an empty store on first run.

Timestamps are relative to the moment of seeding, so each builder is a
function rather than a constant.
"""

from __future__ import annotations

from catcircle.schemas.base import now_ms
from catcircle.schemas.feed import CatChallenge, Community, Post, PostType
from catcircle.schemas.mall import Product
from catcircle.schemas.profiles import CatProfile, OwnerProfile

HOUR_MS = 3_600_000
DAY_MS = 24 * HOUR_MS

CAT_BREEDS = [
    "Ragdoll", "Siamese", "British Shorthair", "Maine Coon", "Persian",
    "Bengal", "Sphynx", "Munchkin", "Other",
]


def _cat(id: str, owner_id: str, name: str, breed: str, age: int, gender: str,
         personality: list[str], health_tags: list[str], avatar: str, bio: str) -> CatProfile:
    return CatProfile(
        id=id, owner_id=owner_id, name=name, breed=breed, age=age, gender=gender,
        neutered=True, personality=personality, health_tags=health_tags, avatar=avatar, bio=bio,
    )


def seed_owners() -> list[OwnerProfile]:
    return [
        OwnerProfile(
            id="owner_me",
            account_name="Ragdoll_Official",
            avatar="https://i.pravatar.cc/150?u=sarah",
            bio="Professional cat lover. Managing a household of fluffy clouds. ☕🐾",
            coin_balance=1250,
            followers_count=840,
            following_count=230,
            cats=[_cat(
                "cat_mochi", "owner_me", "Mochi", "Ragdoll", 2, "Male",
                ["Cuddly", "Vocal"], ["Sensitive Stomach"],
                "https://images.unsplash.com/photo-1548247416-ec66f4900b2e?q=80&w=400",
                "The namesake of this account. A true gentleman.",
            )],
            interests=["Ragdoll Care", "Photography", "Organic Food", "Interior Design"],
        ),
        OwnerProfile(
            id="owner_luna",
            account_name="Kevin_BSH",
            avatar="https://i.pravatar.cc/150?u=kevin",
            bio="British Shorthair enthusiast and amateur photographer.",
            coin_balance=300,
            followers_count=2100,
            following_count=560,
            cats=[_cat(
                "cat_luna", "owner_luna", "Luna", "British Shorthair", 4, "Female",
                ["Independent", "Lazy"], [],
                "https://images.unsplash.com/photo-1513245533132-31f507417b26?q=80&w=400",
                "Ruling from the top of the bookshelf.",
            )],
            interests=["British Shorthair", "Cat Furniture", "Indoor Play", "Photography"],
        ),
        OwnerProfile(
            id="owner_bengal",
            account_name="WildHeart_Leo",
            avatar="https://i.pravatar.cc/150?u=leo",
            bio="Adventure cat owner. Training Leo to hike with me!",
            coin_balance=800,
            followers_count=1500,
            following_count=400,
            cats=[_cat(
                "cat_leo", "owner_bengal", "Leo", "Bengal", 3, "Male",
                ["High Energy", "Adventurous"], [],
                "https://images.unsplash.com/photo-1511044568932-338cba0ad803?q=80&w=400",
                "Leash trained and ready for the wild.",
            )],
            interests=["Adventure Cats", "Training", "Active Play", "Photography"],
        ),
        OwnerProfile(
            id="owner_sphynx",
            account_name="Velvet_Shadow",
            avatar="https://i.pravatar.cc/150?u=shadow",
            bio="Living life without a single hair! 🧥 Skin care is my passion.",
            coin_balance=2400,
            followers_count=4500,
            following_count=120,
            cats=[_cat(
                "cat_shadow", "owner_sphynx", "Shadow", "Sphynx", 3, "Male",
                ["Gentle", "Vocal"], ["Special Diet"],
                "https://images.unsplash.com/photo-1520315342629-6ea920342047?q=80&w=400",
                "Just a warm peach living in a fuzzy world.",
            )],
            interests=["Sphynx Care", "Cat Fashion", "Skincare"],
        ),
        OwnerProfile(
            id="owner_titan",
            account_name="GentleGiant_Titan",
            avatar="https://i.pravatar.cc/150?u=titan",
            bio="Everything is bigger in this house. Even the purrs. 🦁",
            coin_balance=150,
            followers_count=12000,
            following_count=800,
            cats=[_cat(
                "cat_titan", "owner_titan", "Titan", "Maine Coon", 5, "Male",
                ["Gentle", "Lazy"], [],
                "https://images.unsplash.com/photo-1533738363-b7f9aef128ce?q=80&w=400",
                "Half cat, half lion, all love.",
            )],
            interests=["Maine Coon", "Grooming", "Giant Cats"],
        ),
    ]


def seed_communities() -> list[Community]:
    return [
        Community(
            id="comm_bsh",
            name="British Shorthair Club",
            description="A place for the thick-coated, chunky-cheeked royalty.",
            avatar="https://images.unsplash.com/photo-1513245533132-31f507417b26?q=80&w=200",
            member_ids=["owner_luna", "owner_me"],
            creator_id="owner_luna",
            breed_tag="British Shorthair",
        ),
        Community(
            id="comm_wild",
            name="Outdoor Adventurers",
            description="Leash training, hiking, and exploring with our wilder felines.",
            avatar="https://images.unsplash.com/photo-1533738699159-d0c68059bbd1?q=80&w=200",
            member_ids=["owner_bengal", "owner_me"],
            creator_id="owner_bengal",
        ),
    ]


def seed_posts() -> list[Post]:
    now = now_ms()
    return [
        Post(
            id="p1", cat_id="cat_luna", owner_id="owner_luna", type=PostType.DAILY,
            content=(
                "Just staring at a wall for 3 hours. It's an art form, really. You wouldn't "
                "understand the depth of this gray texture. #LifeOfLuna #CatArt"
            ),
            media_url="https://images.unsplash.com/photo-1514888286974-6c03e2ca1dba?q=80&w=800",
            timestamp=now - HOUR_MS, likes=124, tips=45, tags=["Daily", "LazyCat", "Art"],
        ),
        Post(
            id="p2", cat_id="cat_leo", owner_id="owner_bengal", type=PostType.CARE_TIPS,
            content=(
                "Pro Tip: If you're leash training your Bengal, start with the harness at dinner "
                "time. Positive reinforcement is key! Leo now associates the harness with his "
                "favorite treats. 🧗‍♂️🐾"
            ),
            media_url="https://images.unsplash.com/photo-1513360371669-4adaaee41413?q=80&w=800",
            timestamp=now - 2 * HOUR_MS, likes=89, tips=200, tags=["CareTips", "Training", "Bengal"],
        ),
        Post(
            id="p3", cat_id="cat_shadow", owner_id="owner_sphynx", type=PostType.DAILY,
            content=(
                "Found a sunbeam. It's the highest honor a Sphynx can achieve. Who needs fur when "
                "you have 100% efficient heat absorption? ☀️🛋️"
            ),
            media_url="https://images.unsplash.com/photo-1520315342629-6ea920342047?q=80&w=800",
            timestamp=now - 3 * HOUR_MS, likes=256, tips=150, tags=["Daily", "SleepingCat", "Sunlight"],
        ),
        Post(
            id="p4", cat_id="cat_mochi", owner_id="owner_me", type=PostType.PROBLEM,
            content=(
                "Mochi has been refusing his favorite wet food lately. He just looks at it and "
                "walks away... anyone else experiencing a 'hunger strike' this week? Could it be "
                "the new bowl? 🥣🤔"
            ),
            media_url="https://images.unsplash.com/photo-1548247416-ec66f4900b2e?q=80&w=800",
            timestamp=now - 4 * HOUR_MS, likes=32, tips=10, tags=["Problem", "Feeding", "AdviceWanted"],
        ),
        Post(
            id="p5", cat_id="cat_titan", owner_id="owner_titan", type=PostType.DAILY,
            content=(
                "Perspective: Titan is 5 years old and still doesn't realize he's longer than the "
                "dining table. Big cats = big problems (but also big cuddles). 🦁❤️"
            ),
            media_url="https://images.unsplash.com/photo-1533738363-b7f9aef128ce?q=80&w=800",
            timestamp=now - DAY_MS, likes=540, tips=800, tags=["MaineCoon", "GiantCat", "Funny"],
        ),
    ]


def seed_products() -> list[Product]:
    return [
        Product(
            id="pr1", name="Organic Salmon Bites", usd_price=12.99, cat_coin_price=500, category="Food",
            description="Grain-free wild salmon treats for sensitive stomachs. Rich in Omega-3.",
            image_url="https://images.unsplash.com/photo-1589924691106-07c263544129?q=80&w=400",
        ),
        Product(
            id="pr2", name="Velvet Winter Cape", usd_price=24.50, cat_coin_price=1200, category="Clothes",
            description="Ultra-soft lining for hairless cats or chilly kittens. Stylish and functional.",
            image_url="https://images.unsplash.com/photo-1548546738-8509cb246ed3?q=80&w=400",
        ),
        Product(
            id="pr3", name="Smart Laser Tower", usd_price=35.00, cat_coin_price=2000, category="Gear",
            description="Automated 360-degree laser play. Keep your indoor cat active and happy.",
            image_url="https://images.unsplash.com/photo-1608501078713-8e445a709b39?q=80&w=400",
        ),
    ]


def seed_challenges() -> list[CatChallenge]:
    now = now_ms()
    return [
        CatChallenge(
            id="ch1", title="Sleeping Beauty 😴",
            description="Post a photo of your cat sleeping to win a big bonus!",
            reward=50, tag="#SleepingCat", end_date=now + 2 * DAY_MS,
        ),
        CatChallenge(
            id="ch2", title="Outdoor Explorer 🧭",
            description="Show us your cat on a leash or exploring the garden!",
            reward=100, tag="#AdventureCat", end_date=now + 5 * DAY_MS,
        ),
    ]
