"""Seed data written when the data file is created."""
from __future__ import annotations

from datetime import timedelta

from vacations_api.core.security import hash_password
from vacations_api.core.utils import new_id, now_iso, to_iso, utcnow

SEED_USERS = (
    ("testuser", "test@southwestvacations.com", "password123", "user"),
    ("manager", "manager@southwestvacations.com", "password123", "manager"),
    ("admin", "admin@southwestvacations.com", "admin123", "admin"),
)


def _hotel(hotel_id, name, location, price, rating, amenities, image):
    return {
        "id": hotel_id,
        "name": name,
        "location": location,
        "pricePerNight": price,
        "rating": rating,
        "amenities": amenities,
        "imageUrl": image,
    }


def _car(car_id, company, model, car_type, price, image):
    return {
        "id": car_id,
        "company": company,
        "model": model,
        "type": car_type,
        "pricePerDay": price,
        "imageUrl": image,
    }


def seed_trips() -> list[dict]:
    return [
        {
            "id": "trip1",
            "destination": "Hawaii",
            "imageUrl": "/images/southwest-hawaii.jpg",
            "price": 1299,
            "category": "beach",
            "duration": 7,
            "description": "Experience the beauty of Hawaii with Southwest Airlines. Enjoy pristine beaches, "
            "volcanic landscapes, and rich cultural heritage.",
            "datesAvailable": ["2025-06-01", "2025-07-01", "2025-08-01"],
            "hotels": [
                _hotel("hotel1-1", "Hawaiian Paradise Resort", "Waikiki Beach", 299, 4.7,
                       ["Beach Access", "Pool", "Spa", "Free WiFi", "Restaurant"], "/images/hotel-hawaii-1.jpg"),
                _hotel("hotel1-2", "Tropical Beach Hotel", "Maui", 349, 4.8,
                       ["Ocean View", "Pool", "Golf Course", "Free Breakfast", "Fitness Center"],
                       "/images/hotel-hawaii-2.jpg"),
            ],
            "carRentals": [
                _car("car1-1", "Aloha Car Rentals", "Jeep Wrangler", "suv", 89, "/images/car-jeep.jpg"),
                _car("car1-2", "Island Cars", "Convertible Mustang", "luxury", 129, "/images/car-mustang.jpg"),
            ],
        },
        {
            "id": "trip2",
            "destination": "Cancun",
            "imageUrl": "/images/southwest-cancun.jpg",
            "price": 899,
            "category": "beach",
            "duration": 5,
            "description": "Relax on the stunning beaches of Cancun with Southwest Airlines. Crystal-clear waters, "
            "vibrant nightlife, and ancient Mayan ruins await.",
            "datesAvailable": ["2025-06-15", "2025-07-15", "2025-08-15"],
            "hotels": [
                _hotel("hotel2-1", "Cancun Beachfront Resort", "Hotel Zone", 249, 4.6,
                       ["All-Inclusive", "Beach Access", "Pool", "Spa", "Nightclub"], "/images/hotel-cancun-1.jpg"),
                _hotel("hotel2-2", "Maya Riviera Lodge", "Playa del Carmen", 279, 4.5,
                       ["Swim-up Rooms", "Multiple Restaurants", "Water Sports", "Entertainment"],
                       "/images/hotel-cancun-2.jpg"),
            ],
            "carRentals": [
                _car("car2-1", "Mexico Drive", "Volkswagen Jetta", "midsize", 65, "/images/car-jetta.jpg"),
                _car("car2-2", "Cancun Cars", "Chevrolet Spark", "economy", 45, "/images/car-spark.jpg"),
            ],
        },
        {
            "id": "trip3",
            "destination": "Las Vegas",
            "imageUrl": "/images/southwest-vegas.jpg",
            "price": 599,
            "category": "city",
            "duration": 3,
            "description": "Experience the excitement of Las Vegas with Southwest Airlines. World-class "
            "entertainment, dining, and gaming in the heart of the desert.",
            "datesAvailable": ["2025-05-01", "2025-06-01", "2025-07-01"],
            "hotels": [
                _hotel("hotel3-1", "Desert Oasis Casino & Resort", "The Strip", 199, 4.5,
                       ["Casino", "Multiple Restaurants", "Shows", "Pool", "Spa"], "/images/hotel-vegas-1.jpg"),
                _hotel("hotel3-2", "Vegas Luxury Suites", "Downtown", 229, 4.4,
                       ["All-Suite Rooms", "Rooftop Pool", "Free Airport Shuttle", "24-Hour Room Service"],
                       "/images/hotel-vegas-2.jpg"),
            ],
            "carRentals": [
                _car("car3-1", "Desert Wheels", "Ford Mustang Convertible", "luxury", 110,
                     "/images/car-mustang-convertible.jpg"),
                _car("car3-2", "Vegas Auto", "Toyota Camry", "midsize", 70, "/images/car-camry.jpg"),
            ],
        },
        {
            "id": "trip4",
            "destination": "Denver",
            "imageUrl": "/images/southwest-denver.jpg",
            "price": 499,
            "category": "mountain",
            "duration": 4,
            "description": "Explore the natural beauty of Denver with Southwest Airlines. Mountain adventures, "
            "urban attractions, and breathtaking landscapes.",
            "datesAvailable": ["2025-05-15", "2025-06-15", "2025-07-15"],
            "hotels": [
                _hotel("hotel4-1", "Rocky Mountain Lodge", "Downtown Denver", 179, 4.3,
                       ["Mountain Views", "Free Breakfast", "Fitness Center", "Spa", "Restaurant"],
                       "/images/hotel-denver-1.jpg"),
                _hotel("hotel4-2", "Urban Altitude Hotel", "Cherry Creek", 219, 4.5,
                       ["Rooftop Pool", "Bar", "Pet Friendly", "Free WiFi", "Business Center"],
                       "/images/hotel-denver-2.jpg"),
            ],
            "carRentals": [
                _car("car4-1", "Mountain Explorers", "Jeep Grand Cherokee", "suv", 85, "/images/car-jeep-cherokee.jpg"),
                _car("car4-2", "Denver Auto", "Subaru Outback", "midsize", 65, "/images/car-outback.jpg"),
            ],
        },
        {
            "id": "trip5",
            "destination": "Orlando",
            "imageUrl": "/images/southwest-orlando.jpg",
            "price": 699,
            "category": "family",
            "duration": 5,
            "description": "Discover the magic of Orlando with Southwest Airlines. World-famous theme parks, "
            "family attractions, and year-round sunshine.",
            "datesAvailable": ["2025-05-01", "2025-06-01", "2025-07-01"],
            "hotels": [
                _hotel("hotel5-1", "Magic Kingdom Resort", "Near Disney World", 259, 4.6,
                       ["Theme Park Shuttle", "Pool", "Kids Club", "Restaurant", "Character Breakfast"],
                       "/images/hotel-orlando-1.jpg"),
                _hotel("hotel5-2", "Sunshine Family Hotel", "International Drive", 189, 4.2,
                       ["Water Park", "Game Room", "Multiple Pools", "Restaurant", "Theme Park Tickets"],
                       "/images/hotel-orlando-2.jpg"),
                _hotel("hotel5-3", "Luxury Orlando Villas", "Lake Buena Vista", 349, 4.8,
                       ["Full Kitchen", "Private Pool", "Multiple Bedrooms", "BBQ Area", "Golf Course"],
                       "/images/hotel-orlando-3.jpg"),
            ],
            "carRentals": [
                _car("car5-1", "Sunshine Rentals", "Chrysler Pacifica", "minivan", 95, "/images/car-pacifica.jpg"),
                _car("car5-2", "Family Wheels", "Toyota Sienna", "minivan", 89, "/images/car-sienna.jpg"),
            ],
        },
        {
            "id": "trip6",
            "destination": "San Francisco",
            "imageUrl": "/images/southwest-sanfrancisco.jpg",
            "price": 799,
            "category": "city",
            "duration": 4,
            "description": "Experience the charm of San Francisco with Southwest Airlines. Iconic landmarks, "
            "diverse neighborhoods, and stunning bay views.",
            "datesAvailable": ["2025-05-15", "2025-06-15", "2025-07-15"],
            "hotels": [
                _hotel("hotel6-1", "Golden Gate Hotel", "Fisherman's Wharf", 299, 4.4,
                       ["Bay Views", "Restaurant", "Bike Rentals", "Concierge", "Walking Tours"],
                       "/images/hotel-sf-1.jpg"),
                _hotel("hotel6-2", "Urban Boutique SF", "Union Square", 279, 4.3,
                       ["Rooftop Bar", "Fitness Center", "Free WiFi", "Business Center", "Restaurant"],
                       "/images/hotel-sf-2.jpg"),
                _hotel("hotel6-3", "Bay View Inn & Spa", "Nob Hill", 329, 4.7,
                       ["Luxury Spa", "Fine Dining", "City Views", "Concierge", "Room Service"],
                       "/images/hotel-sf-3.jpg"),
            ],
            "carRentals": [
                _car("car6-1", "Bay Area Rentals", "Toyota Prius", "economy", 55, "/images/car-prius.jpg"),
                _car("car6-2", "SF Luxury Wheels", "Tesla Model 3", "luxury", 135, "/images/car-tesla.jpg"),
            ],
        },
    ]


def seed_permissions() -> list[dict]:
    rows = (
        ("view_bookings", "View all bookings", "bookings", "read"),
        ("create_booking", "Create new bookings", "bookings", "create"),
        ("update_booking", "Update existing bookings", "bookings", "update"),
        ("delete_booking", "Delete bookings", "bookings", "delete"),
        ("view_analytics", "View analytics dashboard", "analytics", "read"),
        ("export_reports", "Export reports", "reports", "export"),
        ("approve_discounts", "Approve discount applications", "discounts", "approve"),
        ("manage_users", "Create and manage user accounts", "users", "update"),
        ("assign_roles", "Assign roles to users", "roles", "update"),
        ("manage_training", "Manage training courses and materials", "training", "update"),
    )
    return [
        {"id": str(idx), "name": name, "description": desc, "resource": resource, "action": action}
        for idx, (name, desc, resource, action) in enumerate(rows, start=1)
    ]


def seed_roles() -> list[dict]:
    created = now_iso()
    rows = (
        ("customer", "Customer", "Regular customer account with limited access", ["1"]),
        ("agent", "Booking Agent", "Booking agent with access to create and manage bookings", ["1", "2", "3"]),
        ("supervisor", "Supervisor", "Team supervisor with expanded permissions",
         ["1", "2", "3", "4", "5", "6", "7"]),
        ("admin", "Administrator", "System administrator with full access",
         ["1", "2", "3", "4", "5", "6", "7", "8", "9", "10"]),
        ("system", "System Service", "System service account for automated operations", ["1", "2", "3", "4"]),
    )
    return [
        {
            "id": str(idx),
            "name": name,
            "displayName": display,
            "description": desc,
            "permissions": perms,
            "createdAt": created,
        }
        for idx, (name, display, desc, perms) in enumerate(rows, start=1)
    ]


def _quiz(quiz_id: str, passing_score: int, questions: list[tuple[str, list[str], int]]) -> dict:
    return {
        "id": quiz_id,
        "passingScore": passing_score,
        "questions": [
            {"id": f"{quiz_id}-q{n}", "question": text, "options": options, "correctAnswerIndex": answer}
            for n, (text, options, answer) in enumerate(questions, start=1)
        ],
    }


def seed_training_courses() -> list[dict]:
    created = now_iso()
    return [
        {
            "id": "course-1",
            "title": "Booking System Fundamentals",
            "description": "Learn the basics of the Southwest Vacations booking platform and customer "
            "service essentials.",
            "duration": 120,
            "modules": [
                {
                    "id": "course-1-m1",
                    "title": "Platform Introduction",
                    "content": "Overview of the Southwest Vacations booking platform and its key features.",
                    "timeToComplete": 20,
                    "resourceLinks": ["/resources/platform-guide.pdf", "/resources/quick-reference.pdf"],
                },
                {
                    "id": "course-1-m2",
                    "title": "Creating Basic Bookings",
                    "content": "Step-by-step guide to creating single and round-trip bookings for customers.",
                    "timeToComplete": 35,
                    "quizzes": [
                        _quiz("quiz-1", 80, [
                            ("What information is required to create a basic booking?",
                             ["Customer name only", "Customer name, email, and travel dates",
                              "Customer name, email, travel dates, and payment information",
                              "Only a confirmation number"], 2),
                            ("When should you verify customer ID information?",
                             ["Never, it's not necessary", "Only for international flights",
                              "Before completing any booking", "Only when the customer requests it"], 2),
                        ])
                    ],
                },
                {
                    "id": "course-1-m3",
                    "title": "Customer Service Essentials",
                    "content": "Standards for customer interactions and handling common customer requests.",
                    "timeToComplete": 40,
                    "resourceLinks": ["/resources/service-standards.pdf"],
                },
                {
                    "id": "course-1-m4",
                    "title": "Troubleshooting Common Issues",
                    "content": "How to identify and resolve common booking and customer service issues.",
                    "timeToComplete": 25,
                    "quizzes": [
                        _quiz("quiz-2", 70, [
                            ("What is the first step when a customer reports a booking error?",
                             ["Tell them to contact IT support",
                              "Verify the booking details with the confirmation number",
                              "Immediately issue a refund", "Ask them to try again later"], 1),
                        ])
                    ],
                },
            ],
            "requiredFor": ["all"],
            "category": "required",
            "level": "beginner",
            "createdAt": created,
        },
        {
            "id": "course-2",
            "title": "Advanced Booking Techniques",
            "description": "Master multi-destination itineraries, group bookings, and special accommodation "
            "requests.",
            "duration": 180,
            "modules": [
                {
                    "id": "course-2-m1",
                    "title": "Multi-destination Booking Mastery",
                    "content": "Creating complex multi-destination itineraries with multiple segments.",
                    "timeToComplete": 45,
                    "resourceLinks": ["/resources/multi-destination-guide.pdf"],
                },
                {
                    "id": "course-2-m2",
                    "title": "Group Booking Management",
                    "content": "Techniques for managing large group bookings efficiently.",
                    "timeToComplete": 40,
                    "quizzes": [
                        _quiz("quiz-3", 80, [
                            ("What is the maximum number of passengers allowed in a single group booking?",
                             ["5", "8", "15", "No limit"], 2),
                        ])
                    ],
                },
                {
                    "id": "course-2-m3",
                    "title": "Package Customization",
                    "content": "Creating tailored vacation packages with custom add-ons and special offers.",
                    "timeToComplete": 60,
                    "quizzes": [
                        _quiz("quiz-4", 80, [
                            ("Which add-on services can be included in a vacation package?",
                             ["Only hotels", "Hotels and car rentals only",
                              "Hotels, car rentals, and activities", "None of the above"], 2),
                        ])
                    ],
                },
            ],
            "requiredFor": ["agent", "supervisor"],
            "category": "certification",
            "level": "intermediate",
            "createdAt": created,
        },
        {
            "id": "course-3",
            "title": "Booking Policy Certification",
            "description": "Comprehensive training on all Southwest Vacations booking policies and procedures.",
            "duration": 150,
            "modules": [
                {
                    "id": "course-3-m1",
                    "title": "Refund and Cancellation Policies",
                    "content": "Understanding and applying the refund and cancellation policies correctly.",
                    "timeToComplete": 40,
                    "resourceLinks": ["/resources/refund-policy.pdf"],
                },
                {
                    "id": "course-3-m2",
                    "title": "Change Fee Structures",
                    "content": "Overview of change fee structures and when they apply.",
                    "timeToComplete": 30,
                    "quizzes": [
                        _quiz("quiz-5", 100, [
                            ("When can change fees be waived?",
                             ["Never", "Only for Rapid Rewards members",
                              "In case of emergency or special circumstances", "For any customer who asks"], 2),
                        ])
                    ],
                },
                {
                    "id": "course-3-m3",
                    "title": "Regulatory Compliance",
                    "content": "Ensuring bookings comply with all relevant regulations and requirements.",
                    "timeToComplete": 45,
                    "quizzes": [
                        _quiz("quiz-6", 90, [
                            ("What customer information must be verified for international bookings?",
                             ["Nothing special is required", "Just name and email",
                              "Full name as it appears on passport, passport number, and expiration date",
                              "Only their Rapid Rewards number"], 2),
                        ])
                    ],
                },
            ],
            "requiredFor": ["all"],
            "category": "certification",
            "level": "advanced",
            "createdAt": created,
        },
    ]


def seed_policies() -> list[dict]:
    rows = (
        ("policy-1", "General Booking Terms & Conditions",
         "These terms and conditions govern all bookings made through Southwest Vacations.",
         "2.1", "2023-01-15", "general"),
        ("policy-2", "Refund & Cancellation Policy",
         "Customers may cancel their booking and receive a full refund within 24 hours of booking.",
         "3.2", "2023-03-10", "refunds"),
        ("policy-3", "Multi-destination Booking Guidelines",
         "When booking multi-destination itineraries, each segment must have valid connecting options.",
         "1.5", "2023-05-22", "general"),
        ("policy-4", "Customer Service Standards",
         "All customer interactions must meet the Southwest Airlines standard of hospitality.",
         "2.0", "2023-04-01", "customer-service"),
    )
    return [
        {
            "id": pid,
            "title": title,
            "content": content,
            "version": version,
            "effectiveDate": effective,
            "category": category,
            "isActive": True,
            "acknowledgmentRequired": True,
        }
        for pid, title, content, version, effective, category in rows
    ]


def seed_promotions() -> list[dict]:
    now = utcnow()
    return [
        {
            "id": new_id(),
            "code": "SUMMER25",
            "description": "25% off summer beach getaways",
            "discountType": "percentage",
            "discountValue": 25,
            "startDate": to_iso(now - timedelta(days=30)),
            "endDate": to_iso(now + timedelta(days=335)),
            "restrictions": "Beach destinations only",
            "status": "active",
            "eligibleDestinations": ["Hawaii", "Cancun"],
            "minBookingValue": 500,
            "createdAt": now_iso(),
            "createdBy": "system",
        }
    ]


def build_user(username: str, email: str, password_hash: str, role: str) -> dict:
    return {
        "id": new_id(),
        "username": username,
        "email": email,
        "passwordHash": password_hash,
        "createdAt": now_iso(),
        "isAdmin": role == "admin",
        "isEmployee": role in {"admin", "manager", "agent"},
        "role": role,
        "status": "active",
        "preferences": {},
    }


def seed_users() -> list[dict]:
    hashes: dict[str, str] = {}
    users = []
    for username, email, password, role in SEED_USERS:
        if password not in hashes:
            hashes[password] = hash_password(password)
        users.append(build_user(username, email, hashes[password], role))
    return users


def build_seed_document() -> dict:
    return {
        "users": seed_users(),
        "trips": seed_trips(),
        "promotions": seed_promotions(),
        "permissions": seed_permissions(),
        "roles": seed_roles(),
        "trainingCourses": seed_training_courses(),
        "policies": seed_policies(),
    }


def ensure_seed_users(store) -> list[str]:
    """Insert any missing seed user and return the e-mails that were added."""
    users = store.get("users")
    added = []
    for username, email, password, role in SEED_USERS:
        if users.find(lambda u, e=email: (u.get("email") or "").lower() == e).value():
            continue
        users.push(build_user(username, email, hash_password(password), role))
        added.append(email)
    if added:
        store.write()
    return added


def ensure_reference_data(store) -> list[str]:
    """Fill empty reference collections (roles, courses, ...) in older data files."""
    builders = {
        "trips": seed_trips,
        "permissions": seed_permissions,
        "roles": seed_roles,
        "trainingCourses": seed_training_courses,
        "policies": seed_policies,
    }
    filled = []
    for name, build in builders.items():
        collection = store.get(name)
        if collection.size():
            continue
        collection.value().extend(build())
        filled.append(name)
    if filled:
        store.write()
    return filled
