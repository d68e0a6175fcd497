# Description: Configured content for the informational pages (pricing, how-it-works, privacy).

pricing_plans = [
    {
        "name": "Free",
        "price": "$0",
        "description": "Perfect for new sellers getting started.",
        "features": [
            "5 images per day",
            "Standard processing speed",
            "1200x1200px output",
            "Basic AI outpainting",
            "Community support",
        ],
        "cta": "Get Started",
        "popular": False,
    },
    {
        "name": "Pro",
        "price": "$19",
        "period": "/mo",
        "description": "For growing brands with high volume.",
        "features": [
            "Unlimited images",
            "Priority processing speed",
            "4K High-Res output",
            "Advanced subject preservation",
            "AI Image Analysis & Edits",
            "Thinking Mode reasoning",
        ],
        "cta": "Go Pro",
        "popular": True,
    },
    {
        "name": "Enterprise",
        "price": "Custom",
        "description": "For large agencies and marketplaces.",
        "features": [
            "API access",
            "Dedicated account manager",
            "Custom AI model training",
            "SLA & uptime guarantees",
            "Bulk batch processing",
            "White-label options",
        ],
        "cta": "Contact Sales",
        "popular": False,
    },
]

plan_comparison = [
    {"feature": "Daily Image Limit", "free": "5", "pro": "Unlimited", "enterprise": "Unlimited"},
    {"feature": "Max Resolution", "free": "1.2K", "pro": "4K", "enterprise": "8K+"},
    {"feature": "AI Model", "free": "Flash", "pro": "Pro Image", "enterprise": "Custom"},
    {"feature": "Processing Speed", "free": "Standard", "pro": "Priority", "enterprise": "Dedicated"},
    {"feature": "Image Analysis", "free": "-", "pro": "Included", "enterprise": "Advanced"},
    {"feature": "Thinking Mode", "free": "-", "pro": "Included", "enterprise": "Included"},
    {"feature": "API Access", "free": "-", "pro": "-", "enterprise": "Included"},
    {"feature": "Support", "free": "Email", "pro": "Priority", "enterprise": "24/7 Dedicated"},
]

pricing_faq = [
    {
        "q": "Can I cancel anytime?",
        "a": "Yes, you can cancel your subscription at any time from your account settings. "
        "You'll keep access until the end of your billing period.",
    },
    {
        "q": "Do you offer bulk discounts?",
        "a": "For agencies processing more than 1,000 images per month, please contact our "
        "sales team for custom enterprise pricing.",
    },
    {
        "q": "What image formats are supported?",
        "a": "We currently support JPG and PNG files up to 10MB in size. We recommend "
        "high-resolution originals for the best outpainting results.",
    },
    {
        "q": "Is my data secure?",
        "a": "Absolutely. We use industry-standard encryption and automatically delete all "
        "processed images after 24 hours.",
    },
]

how_it_works_steps = [
    {
        "number": 1,
        "title": "Upload Your Product Photo.",
        "description": "Upload any product image, a vertical phone shot or a wide landscape "
        "photo. We support JPG and PNG up to 10MB.",
    },
    {
        "number": 2,
        "title": "AI Outpainting & Resizing.",
        "description": "Instead of cropping away product details, Gemini outpaints the "
        "background, matching textures, lighting and colors to fill a 1:1 square.",
    },
    {
        "number": 3,
        "title": "Download & List.",
        "description": "Get a 1200x1200px image that meets TikTok Shop's requirements and "
        "upload it straight to your seller center.",
    },
]

privacy_sections = [
    {
        "title": "Our Commitment to Security.",
        "body": "Your product images are valuable business assets. We protect your privacy "
        "and handle your data with the highest level of security.",
    },
    {
        "title": "What we collect and why.",
        "body": "We only collect the images you upload, for the sole purpose of processing "
        "them. We do not train models on your images or share them with third parties "
        "other than our AI processing partner (Google Gemini API).",
    },
    {
        "title": "Automatic Deletion.",
        "body": "Uploaded and processed images are deleted from temporary storage after "
        "24 hours. We do not keep long-term archives of your content.",
    },
    {
        "title": "Industry-standard protection.",
        "body": "Data is encrypted in transit and while temporarily stored, on cloud "
        "infrastructure with rigorous security certifications.",
    },
]
