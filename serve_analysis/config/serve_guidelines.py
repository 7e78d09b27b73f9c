"""
Serve Reference Guidelines

Reference bands for tennis serve biomechanics, drawn from elite-performance
observations, plus the anthropometric ratio used for scale calibration.

Every table here is declarative: band boundaries and per-tier coaching text
live in data, and the evaluators only walk the tables. Tuning a band never
requires touching control flow.

Band semantics:
    A range dict {'min': a, 'max': b, 'include_max': flag} matches value v when
    a <= v < b (or a <= v <= b if include_max). A missing/None bound is open.
    Tiers are checked in order; the first matching tier wins. Values that match
    no explicit tier fall through to the metric's fallback tier (Critical for
    feedback, the default score for scoring).
"""


# =============================================================================
# ANTHROPOMETRIC RATIOS
# =============================================================================
# Segment lengths as a proportion of standing height.

ANTHROPOMETRIC_RATIOS = {
    # Shoulder-midpoint to hip-midpoint distance as proportion of height.
    # Clinical use here: calibration reference for detector-native units.
    'torso_to_height': 0.30,
}

# Plausible adult standing height range (cm); heights outside are accepted but logged
PLAUSIBLE_HEIGHT_CM = (100.0, 250.0)


# =============================================================================
# ELITE REFERENCE
# =============================================================================
# Ideal ranges shown to the user alongside each assessment.

ELITE_REFERENCE = {
    'knee_flexion': {
        'label': 'Knee flexion',
        'ideal_range': '40-60°',
        'unit': '°',
    },
    'hip_shoulder_separation': {
        'label': 'Hip-shoulder separation',
        'ideal_range': '30-50°',
        'unit': '°',
    },
    'contact_height': {
        'label': 'Contact height',
        'ideal_range': '>2.4m',
        'unit': 'm',
        # Based on a 1.8 m tall player
        'reference_height_m': 1.8,
    },
    'wrist_velocity': {
        'label': 'Racket head speed',
        'ideal_range': '>15 m/s',
        'unit': 'm/s',
    },
    'elbow_angle': {
        'label': 'Elbow angle',
        'ideal_range': '90-150°',
        'unit': '°',
    },
    'overall': {
        'label': 'Overall',
        'ideal_range': '70-100',
        'unit': 'pts',
    },
}


# =============================================================================
# FEEDBACK BANDS (4 tiers)
# =============================================================================
# message is formatted with the measured value as {value}.

FEEDBACK_BANDS = {
    'knee_flexion': {
        'tiers': [
            {
                'severity': 'excellent',
                'ranges': [{'min': 50.0, 'max': 60.0, 'include_max': True}],
                'message': "Knee flexion excellent ({value:.0f}°)",
                'actionable': "Keep this depth, your loading position is at a professional level.",
                'impact': "Provides strong upward drive into the ball",
            },
            {
                'severity': 'good',
                'ranges': [{'min': 40.0, 'max': 50.0}],
                'message': "Knee flexion good ({value:.0f}°)",
                'actionable': "Try sinking slightly deeper to store more energy in the legs.",
                'impact': "Could add 5-10% serve speed",
            },
            {
                'severity': 'warning',
                'ranges': [{'min': 30.0, 'max': 40.0}],
                'message': "Knee flexion insufficient ({value:.0f}°)",
                'actionable': "Bend the knees to 40-60° while loading, like compressing a spring.",
                'impact': "Fixing this can add 15-20% serve speed",
            },
        ],
        'fallback': {
            'severity': 'critical',
            'message': "Knee flexion far outside the loading range ({value:.0f}°)",
            'actionable': "Focus on a much deeper knee bend, as if sitting back onto a chair, at least 40°.",
            'impact': "Leg drive is the main power source, fixing it can add 30% or more speed",
        },
    },

    'hip_shoulder_separation': {
        'tiers': [
            {
                'severity': 'excellent',
                'ranges': [{'min': 40.0, 'max': 50.0, 'include_max': True}],
                'message': "Hip-shoulder separation ideal ({value:.0f}°)",
                'actionable': "Great trunk rotation, keep it up.",
                'impact': "Kinetic chain is well coordinated and transfers force efficiently",
            },
            {
                'severity': 'good',
                'ranges': [{'min': 30.0, 'max': 40.0}],
                'message': "Hip-shoulder separation good ({value:.0f}°)",
                'actionable': "Hold this rotation or try a slightly bigger coil.",
                'impact': "Solid sequencing, more practice gets you to the top range",
            },
            {
                'severity': 'warning',
                'ranges': [{'min': 20.0, 'max': 30.0}],
                'message': "Hip-shoulder separation limited ({value:.0f}°)",
                'actionable': "Turn the hips first, then let the shoulders follow, like wringing a towel.",
                'impact': "Better use of trunk rotation for power",
            },
        ],
        'fallback': {
            'severity': 'critical',
            'message': "Hip-shoulder separation too small ({value:.0f}°)",
            'actionable': "Increase the gap between hip and shoulder rotation, delay the shoulder turn.",
            'impact': "This is the core of the kinetic chain, fixing it adds significant power",
        },
    },

    'contact_height': {
        'tiers': [
            {
                'severity': 'excellent',
                'ranges': [{'min': 2.5}],
                'message': "Contact height outstanding ({value:.2f}m)",
                'actionable': "Perfect contact point, keep reaching up like this.",
                'impact': "A high contact point gives a steeper angle and more net clearance",
            },
            {
                'severity': 'good',
                'ranges': [{'min': 2.4, 'max': 2.5}],
                'message': "Contact height good ({value:.2f}m)",
                'actionable': "Already a high contact, keep the upward extension.",
                'impact': "Good net clearance and downward angle",
            },
            {
                'severity': 'warning',
                'ranges': [{'min': 2.2, 'max': 2.4}],
                'message': "Contact point slightly low ({value:.2f}m)",
                'actionable': "Reach another 10-20cm upward at contact to use your full height.",
                'impact': "More net clearance and fewer serves into the net",
            },
        ],
        'fallback': {
            'severity': 'critical',
            'message': "Contact point too low ({value:.2f}m)",
            'actionable': "Raise the contact point, drive up and fully extend the hitting arm.",
            'impact': "Low contact causes frequent net errors, raising it lifts first-serve percentage",
        },
    },

    'wrist_velocity': {
        'tiers': [
            {
                'severity': 'excellent',
                'ranges': [{'min': 20.0}],
                'message': "Racket head speed very fast ({value:.1f} m/s)",
                'actionable': "Outstanding swing speed, your technique is at a top level.",
                'impact': "Estimated serve speed above 180 km/h",
            },
            {
                'severity': 'good',
                'ranges': [{'min': 15.0, 'max': 20.0}],
                'message': "Racket head speed good ({value:.1f} m/s)",
                'actionable': "Solid speed, keep training explosiveness and the whip action.",
                'impact': "Estimated serve speed 150-180 km/h",
            },
            {
                'severity': 'warning',
                'ranges': [{'min': 10.0, 'max': 15.0}],
                'message': "Racket head speed on the slow side ({value:.1f} m/s)",
                'actionable': "Accelerate through contact and snap the wrist like a whip.",
                'impact': "More speed makes the serve noticeably more dangerous",
            },
        ],
        'fallback': {
            'severity': 'critical',
            'message': "Racket head speed too slow ({value:.1f} m/s)",
            'actionable': "Transfer force from the whole body into the wrist to raise swing speed.",
            'impact': "Speed is the key to serve power, improving it multiplies the threat",
        },
    },

    'elbow_angle': {
        'tiers': [
            {
                'severity': 'excellent',
                'ranges': [{'min': 100.0, 'max': 140.0}],
                'message': "Elbow angle in the elite range ({value:.0f}°)",
                'actionable': "Good arm structure through the strike, keep it.",
                'impact': "Efficient force transfer from shoulder to racket",
            },
            {
                'severity': 'good',
                'ranges': [
                    {'min': 90.0, 'max': 100.0},
                    {'min': 140.0, 'max': 150.0},
                ],
                'message': "Elbow angle acceptable ({value:.0f}°)",
                'actionable': "Aim for 100-140° at the strike for a cleaner lever.",
                'impact': "Small gains in racket head speed",
            },
            {
                'severity': 'warning',
                'ranges': [
                    {'min': 75.0, 'max': 90.0},
                    {'min': 150.0, 'max': 165.0, 'include_max': True},
                ],
                'message': "Elbow angle off the ideal range ({value:.0f}°)",
                'actionable': "Avoid locking or collapsing the hitting arm, keep 90-150°.",
                'impact': "Reduces strain on the elbow and improves consistency",
            },
        ],
        'fallback': {
            'severity': 'critical',
            'message': "Elbow angle far from the ideal range ({value:.0f}°)",
            'actionable': "Work on arm structure in shadow swings before adding speed.",
            'impact': "Poor arm structure limits power and raises injury risk",
        },
    },
}


# Overall assessment keyed to the composite quality score (0-100)
OVERALL_FEEDBACK_BANDS = {
    'tiers': [
        {
            'severity': 'excellent',
            'ranges': [{'min': 90.0}],
            'message': "Serve quality: excellent ({value:.0f} pts)",
            'actionable': "Near-perfect serve, keep this standard.",
            'impact': "Technique is at a strong club-player level",
        },
        {
            'severity': 'good',
            'ranges': [{'min': 70.0, 'max': 90.0}],
            'message': "Serve quality: good ({value:.0f} pts)",
            'actionable': "Solid overall, keep practicing to reach the next level.",
            'impact': "A few details separate you from an excellent serve",
        },
        {
            'severity': 'warning',
            'ranges': [{'min': 50.0, 'max': 70.0}],
            'message': "Serve quality: needs work ({value:.0f} pts)",
            'actionable': "Focus practice on the items flagged as warning or critical.",
            'impact': "Fixing the key metrics lifts serve quality noticeably",
        },
    ],
    'fallback': {
        'severity': 'critical',
        'message': "Serve quality: needs major work ({value:.0f} pts)",
        'actionable': "Start from the fundamentals, knee bend and trunk rotation first.",
        'impact': "Be patient, every improved detail shows up in the serve",
    },
}


# =============================================================================
# SCORE BANDS (3 tiers: 100 / 70 / 40)
# =============================================================================
# Coarser than the feedback tiers; used for loading/contact quality scores.

SCORE_BANDS = {
    'knee_flexion': {
        'tiers': [
            {'score': 100.0, 'ranges': [{'min': 40.0, 'max': 60.0, 'include_max': True}]},
            {'score': 70.0, 'ranges': [{'min': 30.0, 'max': 40.0}, {'min': 60.0, 'max': 75.0}]},
        ],
        'default_score': 40.0,
    },
    'hip_shoulder_separation': {
        'tiers': [
            {'score': 100.0, 'ranges': [{'min': 30.0, 'max': 50.0, 'include_max': True}]},
            {'score': 70.0, 'ranges': [{'min': 20.0, 'max': 30.0}, {'min': 50.0, 'max': 60.0}]},
        ],
        'default_score': 40.0,
    },
    'contact_height': {
        'tiers': [
            {'score': 100.0, 'ranges': [{'min': 2.4}]},
            {'score': 70.0, 'ranges': [{'min': 2.2, 'max': 2.4}]},
        ],
        'default_score': 40.0,
    },
    'wrist_velocity': {
        'tiers': [
            {'score': 100.0, 'ranges': [{'min': 15.0}]},
            {'score': 70.0, 'ranges': [{'min': 10.0, 'max': 15.0}]},
        ],
        'default_score': 40.0,
    },
}

# Which metrics feed each phase's quality score
LOADING_METRICS = ['knee_flexion', 'hip_shoulder_separation']
CONTACT_METRICS = ['contact_height', 'wrist_velocity']

# Feedback categories evaluated by default
DEFAULT_FEEDBACK_METRICS = [
    'knee_flexion',
    'hip_shoulder_separation',
    'contact_height',
    'wrist_velocity',
]
