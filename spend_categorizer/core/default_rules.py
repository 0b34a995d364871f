"""
Built-in keyword rules

Higher priority is checked first; rules sharing a priority are checked in the
order they appear here. Keywords are lowercase substrings.
"""
from typing import Dict, List

DEFAULT_RULES: List[Dict] = [
    # Entertainment - streaming, gaming, cinema
    {
        'keywords': ['netflix', 'spotify', 'disney', 'hulu', 'prime video', 'amazon prime',
                     'youtube premium', 'apple tv', 'hbo', 'paramount', 'peacock'],
        'category': 'Entertainment',
        'priority': 10,
    },
    {
        'keywords': ['steam', 'playstation', 'xbox', 'nintendo', 'epic games', 'ubisoft', 'ea games'],
        'category': 'Entertainment',
        'priority': 10,
    },
    {
        'keywords': ['cinema', 'odeon', 'vue', 'cineworld', 'imax', 'movie', 'theatre', 'theater'],
        'category': 'Entertainment',
        'priority': 9,
    },

    # Subscriptions
    {
        'keywords': ['patreon', 'onlyfans', 'substack', 'medium', 'newsletter'],
        'category': 'Subscriptions',
        'priority': 10,
    },
    {
        'keywords': ['adobe', 'microsoft', 'office 365', 'google workspace', 'dropbox', 'icloud'],
        'category': 'Subscriptions',
        'priority': 9,
    },

    # Coffee & Snacks
    {
        'keywords': ['starbucks', 'costa', 'nero', 'cafe', 'coffee', 'espresso', 'latte', 'cappuccino'],
        'category': 'Coffee & Snacks',
        'priority': 10,
    },
    {
        'keywords': ['bakery', 'pastry', 'donut', 'muffin', 'croissant'],
        'category': 'Coffee & Snacks',
        'priority': 8,
    },

    # Food & Dining
    {
        'keywords': ['restaurant', 'dining', 'bistro', 'brasserie', 'pub', 'bar & grill'],
        'category': 'Food & Dining',
        'priority': 10,
    },
    {
        'keywords': ['mcdonald', 'burger king', 'kfc', 'subway', 'pizza hut', 'domino', 'papa john'],
        'category': 'Food & Dining',
        'priority': 9,
    },
    {
        'keywords': ['deliveroo', 'just eat', 'ubereats', 'doordash', 'grubhub', 'takeaway'],
        'category': 'Food & Dining',
        'priority': 9,
    },
    {
        'keywords': ['tesco', 'supervalu', 'dunnes', 'lidl', 'aldi', 'spar', 'centra', 'eurospar',
                     'groceries', 'supermarket'],
        'category': 'Food & Dining',
        'priority': 8,
    },

    # Transportation
    {
        'keywords': ['uber', 'lyft', 'taxi', 'cab', 'bolt'],
        'category': 'Transportation',
        'priority': 10,
    },
    {
        'keywords': ['dublin bus', 'luas', 'dart', 'irish rail', 'bus eireann'],
        'category': 'Transportation',
        'priority': 9,
    },
    {
        'keywords': ['petrol', 'gas station', 'fuel', 'esso', 'shell', 'bp', 'texaco'],
        'category': 'Transportation',
        'priority': 8,
    },
    {
        'keywords': ['parking', 'park & ride', 'ncp', 'q-park'],
        'category': 'Transportation',
        'priority': 8,
    },

    # Utilities
    {
        'keywords': ['electric ireland', 'sse airtricity', 'energia', 'bord gais', 'prepaypower'],
        'category': 'Utilities',
        'priority': 10,
    },
    {
        'keywords': ['eir', 'vodafone', 'three', 'virgin media', 'sky', 'bt'],
        'category': 'Utilities',
        'priority': 9,
    },
    {
        'keywords': ['water', 'irish water', 'uisce eireann'],
        'category': 'Utilities',
        'priority': 9,
    },

    # Healthcare
    {
        'keywords': ['pharmacy', 'chemist', 'boots', 'meaghers', 'hickey', 'lloyds'],
        'category': 'Healthcare',
        'priority': 10,
    },
    {
        'keywords': ['doctor', 'gp', 'medical', 'clinic', 'hospital', 'dental', 'dentist',
                     'optician', 'physio'],
        'category': 'Healthcare',
        'priority': 9,
    },
    {
        'keywords': ['vhi', 'laya', 'irish life health', 'health insurance'],
        'category': 'Healthcare',
        'priority': 8,
    },

    # Insurance
    {
        'keywords': ['aviva', 'allianz', 'axa', 'fbd', 'liberty', 'zurich', 'insurance'],
        'category': 'Insurance',
        'priority': 9,
    },

    # Shopping
    {
        'keywords': ['amazon', 'ebay', 'etsy', 'asos', 'zalando', 'boohoo'],
        'category': 'Shopping',
        'priority': 9,
    },
    {
        'keywords': ['ikea', 'argos', 'currys', 'harvey norman', 'did electrical'],
        'category': 'Shopping',
        'priority': 8,
    },
    {
        'keywords': ['penneys', 'primark', 'hm ', 'zara', 'mango', 'next'],
        'category': 'Shopping',
        'priority': 8,
    },

    # Education
    {
        'keywords': ['university', 'college', 'school', 'tuition', 'course', 'training'],
        'category': 'Education',
        'priority': 9,
    },

    # Travel
    {
        'keywords': ['hotel', 'airbnb', 'booking.com', 'expedia', 'trivago'],
        'category': 'Travel',
        'priority': 10,
    },
    {
        'keywords': ['aer lingus', 'ryanair', 'easyjet', 'airline', 'airport'],
        'category': 'Travel',
        'priority': 9,
    },
    {
        'keywords': ['train', 'bus', 'ferry', 'car rental', 'hertz', 'avis'],
        'category': 'Travel',
        'priority': 8,
    },

    # Banking & Finance
    {
        'keywords': ['revolut', 'n26', 'aib', 'bank of ireland', 'ulster bank', 'kbc', 'ptsb'],
        'category': 'Banking & Finance',
        'priority': 10,
    },
    {
        'keywords': ['atm', 'withdrawal', 'transfer', 'fee', 'interest'],
        'category': 'Banking & Finance',
        'priority': 8,
    },

    # Charity & Donations
    {
        'keywords': ['charity', 'donation', 'go fund me', 'justgiving'],
        'category': 'Charity & Donations',
        'priority': 9,
    },

    # Home & Garden
    {
        'keywords': ['b&q', 'woodies', 'homebase', 'diy', 'hardware', 'garden centre'],
        'category': 'Home & Garden',
        'priority': 8,
    },

    # Personal Care
    {
        'keywords': ['hairdresser', 'barber', 'salon', 'spa', 'beauty', 'gym', 'fitness'],
        'category': 'Personal Care',
        'priority': 8,
    },
]
