"""
Shared X12 code tables for every generator and parser.

Tables are read-only mappings built once at import. Codes that a table does
not know resolve to "Unknown code: <raw>" so callers keep the raw signal.
"""
from types import MappingProxyType
from typing import Mapping

from x12gateway.utils.logger import get_logger

logger = get_logger(__name__)

CODE_TABLE_VERSION = "005010-2025.1"

UNKNOWN_CODE_LABEL = "Unknown code: {code}"


def _table(entries: dict) -> Mapping[str, str]:
    return MappingProxyType(dict(entries))


def describe(table: Mapping[str, str], code: str) -> str:
    """Description for a code, or the unknown-code fallback label."""
    if code in table:
        return table[code]
    logger.debug("Unrecognized code", code=code)
    return UNKNOWN_CODE_LABEL.format(code=code)


def is_known(table: Mapping[str, str], code: str) -> bool:
    return code in table


# EB03 / EQ01 service type codes
SERVICE_TYPE_CODES = _table(
    {
        "1": "Medical Care",
        "2": "Surgical",
        "3": "Consultation",
        "4": "Diagnostic X-Ray",
        "5": "Diagnostic Lab",
        "12": "Durable Medical Equipment Purchase",
        "30": "Health Benefit Plan Coverage",
        "33": "Chiropractic",
        "35": "Dental Care",
        "42": "Home Health Care",
        "45": "Hospice",
        "47": "Hospital",
        "48": "Hospital - Inpatient",
        "50": "Hospital - Outpatient",
        "51": "Hospital - Emergency Accident",
        "52": "Hospital - Emergency Medical",
        "53": "Hospital - Ambulatory Surgical",
        "54": "Long Term Care",
        "56": "Medically Related Transportation",
        "60": "General Benefits",
        "86": "Emergency Services",
        "88": "Pharmacy",
        "98": "Professional (Physician) Visit - Office",
        "A4": "Psychiatric",
        "A6": "Psychotherapy",
        "A7": "Psychiatric - Inpatient",
        "A8": "Psychiatric - Outpatient",
        "AD": "Occupational Therapy",
        "AE": "Physical Medicine",
        "AG": "Skilled Nursing Care",
        "AI": "Substance Abuse",
        "AL": "Vision (Optometry)",
        "BY": "Physician Visit - Office: Sick",
        "BZ": "Physician Visit - Office: Well",
        "CF": "Mental Health Provider - Inpatient",
        "CG": "Mental Health Provider - Outpatient",
        "HM": "Transportation",
        "MH": "Mental Health",
        "UC": "Urgent Care",
    }
)

# EB01 eligibility or benefit information codes
ELIGIBILITY_CODES = _table(
    {
        "1": "Active Coverage",
        "2": "Active - Full Risk Capitation",
        "3": "Active - Services Capitated",
        "4": "Active - Services Capitated to Primary Care Physician",
        "5": "Active - Pending Investigation",
        "6": "Inactive",
        "7": "Inactive - Pending Eligibility Update",
        "8": "Inactive - Pending Investigation",
        "A": "Co-Insurance",
        "B": "Co-Payment",
        "C": "Deductible",
        "CB": "Coverage Basis",
        "D": "Benefit Description",
        "E": "Exclusions",
        "F": "Limitations",
        "G": "Out of Pocket (Stop Loss)",
        "H": "Unlimited",
        "I": "Non-Covered",
        "J": "Cost Containment",
        "K": "Reserve",
        "L": "Primary Care Provider",
        "M": "Pre-existing Condition",
        "MC": "Managed Care Coordinator",
        "N": "Services Restricted to Following Provider",
        "O": "Not Deemed a Medical Necessity",
        "P": "Benefit Disclaimer",
        "Q": "Second Surgical Opinion Required",
        "R": "Other or Additional Payor",
        "S": "Prior Year(s) History",
        "T": "Card(s) Reported Lost/Stolen",
        "U": "Contact Following Entity for Eligibility or Benefit Information",
        "V": "Cannot Process",
        "W": "Other Source of Data",
        "X": "Health Care Facility",
        "Y": "Spend Down",
    }
)

ACTIVE_ELIGIBILITY_CODES = frozenset({"1", "2", "3", "4", "5"})

# EB02 coverage level codes
COVERAGE_LEVEL_CODES = _table(
    {
        "CHD": "Children Only",
        "DEP": "Dependents Only",
        "ECH": "Employee and Children",
        "EMP": "Employee Only",
        "ESP": "Employee and Spouse",
        "FAM": "Family",
        "IND": "Individual",
        "SPC": "Spouse and Children",
        "SPO": "Spouse Only",
    }
)

# EB04 insurance type codes
INSURANCE_TYPE_CODES = _table(
    {
        "12": "Medicare Secondary Working Aged Beneficiary",
        "13": "Medicare Secondary End-Stage Renal Disease",
        "14": "Medicare Secondary, No-fault Insurance",
        "15": "Medicare Secondary Worker's Compensation",
        "16": "Medicare Secondary Public Health Service",
        "41": "Medicare Secondary Black Lung",
        "42": "Medicare Secondary Veteran's Administration",
        "43": "Medicare Secondary Disabled Beneficiary Under Age 65",
        "47": "Medicare Secondary, Other Liability Insurance is Primary",
        "C1": "Commercial",
        "CO": "Consolidated Omnibus Budget Reconciliation Act (COBRA)",
        "CP": "Medicare Conditionally Primary",
        "D": "Disability",
        "DB": "Disability Benefits",
        "EP": "Exclusive Provider Organization",
        "FF": "Family or Friends",
        "GP": "Group Policy",
        "HM": "Health Maintenance Organization (HMO)",
        "HN": "Health Maintenance Organization (HMO) - Medicare Risk",
        "HS": "Special Low Income Medicare Beneficiary",
        "IN": "Indemnity",
        "IP": "Individual Policy",
        "LC": "Long Term Care",
        "LD": "Long Term Policy",
        "LI": "Life Insurance",
        "LT": "Litigation",
        "MA": "Medicare Part A",
        "MB": "Medicare Part B",
        "MC": "Medicaid",
        "MH": "Medigap Part A",
        "MI": "Medigap Part B",
        "MP": "Medicare Primary",
        "OT": "Other",
        "PE": "Property Insurance - Personal",
        "PL": "Personal",
        "PP": "Personal Payment (Cash - No Insurance)",
        "PR": "Preferred Provider Organization (PPO)",
        "PS": "Point of Service (POS)",
        "QM": "Qualified Medicare Beneficiary",
        "RP": "Property Insurance - Real",
        "SP": "Supplemental Policy",
        "TF": "Tax Equity Fiscal Responsibility Act (TEFRA)",
        "WC": "Workers Compensation",
        "WU": "Wrap Up Policy",
    }
)

# EB06 time period qualifiers
TIME_PERIOD_QUALIFIERS = _table(
    {
        "6": "Hour",
        "7": "Day",
        "13": "24 Hours",
        "21": "Years",
        "22": "Service Year",
        "23": "Calendar Year",
        "24": "Year to Date",
        "25": "Contract",
        "26": "Episode",
        "27": "Visit",
        "28": "Outlier",
        "29": "Remaining",
        "30": "Exceeded",
        "31": "Not Exceeded",
        "32": "Lifetime",
        "33": "Lifetime Remaining",
        "34": "Month",
        "35": "Week",
        "36": "Admission",
    }
)

# AAA03 reject reason codes (271 and 277)
AAA_REJECT_CODES = _table(
    {
        "04": "Authorized Quantity Exceeded",
        "15": "Required Application Data Missing",
        "41": "Authorization/Access Restrictions",
        "42": "Unable to Respond at Current Time",
        "43": "Invalid/Missing Provider Identification",
        "44": "Invalid/Missing Provider Name",
        "45": "Invalid/Missing Provider Specialty",
        "46": "Invalid/Missing Provider Phone Number",
        "47": "Invalid/Missing Provider State",
        "48": "Invalid/Missing Referring Provider Identification Number",
        "49": "Provider is Not Primary Care Physician",
        "50": "Provider Ineligible for Inquiries",
        "51": "Provider Not on File",
        "52": "Service Dates Not Within Provider Plan Enrollment",
        "53": "Inquired Benefit Inconsistent with Provider Type",
        "54": "Inappropriate Product/Service ID Qualifier",
        "55": "Inappropriate Product/Service ID",
        "56": "Inappropriate Date",
        "57": "Invalid/Missing Date(s) of Service",
        "58": "Invalid/Missing Date-of-Birth",
        "60": "Date of Birth Follows Date(s) of Service",
        "61": "Date of Death Precedes Date(s) of Service",
        "62": "Date of Service Not Within Allowable Inquiry Period",
        "63": "Date of Service in Future",
        "64": "Invalid/Missing Patient ID",
        "65": "Invalid/Missing Patient Name",
        "66": "Invalid/Missing Patient Gender Code",
        "67": "Patient Not Found",
        "68": "Duplicate Patient ID Number",
        "69": "Inconsistent with Patient's Age",
        "70": "Inconsistent with Patient's Gender",
        "71": "Patient Birth Date Does Not Match That for the Patient on the Database",
        "72": "Invalid/Missing Subscriber/Insured ID",
        "73": "Invalid/Missing Subscriber/Insured Name",
        "74": "Invalid/Missing Subscriber/Insured Gender Code",
        "75": "Subscriber/Insured Not Found",
        "76": "Duplicate Subscriber/Insured ID Number",
        "77": "Subscriber Found, Patient Not Found",
        "78": "Subscriber/Insured Not in Group/Plan Identified",
        "79": "Invalid Participant Identification",
        "80": "No Response received - Transaction Terminated",
        "97": "Invalid or Missing Provider Address",
        "T4": "Payer Name or Identifier Missing",
        "T5": "Certification Information Missing",
        "T6": "Claim Does Not Match Prior Authorization",
    }
)

# AAA04 follow-up action codes
AAA_FOLLOW_UP_ACTIONS = _table(
    {
        "C": "Please Correct and Resubmit",
        "N": "Resubmission Not Allowed",
        "P": "Please Resubmit Original Transaction",
        "R": "Resubmission Allowed",
        "S": "Do Not Resubmit; Inquiry Initiated to a Third Party",
        "W": "Please Wait 30 Days and Resubmit",
        "X": "Please Wait 10 Days and Resubmit",
        "Y": "Do Not Resubmit; We Will Hold Your Request and Respond Again Shortly",
    }
)

# STC01-1 claim status category codes
STATUS_CATEGORY_CODES = _table(
    {
        "A0": "Acknowledgement/Forwarded",
        "A1": "Acknowledgement/Receipt",
        "A2": "Acknowledgement/Acceptance into adjudication system",
        "A3": "Acknowledgement/Returned as unprocessable claim",
        "A4": "Acknowledgement/Not Found",
        "A5": "Acknowledgement/Split Claim",
        "A6": "Acknowledgement/Rejected for Missing Information",
        "A7": "Acknowledgement/Rejected for Invalid Information",
        "A8": "Acknowledgement/Rejected for relational field in error",
        "P0": "Pending: Adjudication/Details are not available",
        "P1": "Pending/In Process",
        "P2": "Pending/Payer Review",
        "P3": "Pending/Provider Requested Information",
        "P4": "Pending/Patient Requested Information",
        "P5": "Pending/Payer Administrative/System hold",
        "F0": "Finalized",
        "F1": "Finalized/Payment",
        "F2": "Finalized/Denial",
        "F3": "Finalized/Revised",
        "F3F": "Finalized/Forwarded",
        "F3N": "Finalized/Not Forwarded",
        "F4": "Finalized/Adjudication Complete - No payment forthcoming",
        "D0": "Data Search Unsuccessful",
        "E0": "Response not possible - error on submitted request data",
        "E1": "Response not possible - System Status",
        "E2": "Information Holder is not responding; resubmit at a later time",
        "E3": "Correction required - relational fields in error",
        "E4": "Trading partner agreement specific requirement not met",
        "R0": "Requests for additional Information/General Requests",
        "R1": "Requests for additional Information/Entity Requests",
        "R3": "Requests for additional Information/Claim/Line",
        "RQ": "General Requests",
    }
)

# STC01-2 claim status codes (subset observed in practice)
CLAIM_STATUS_CODES = _table(
    {
        "0": "Cannot provide further status electronically",
        "1": "For more detailed information, see remittance advice",
        "2": "More detailed information in letter",
        "3": "Claim has been adjudicated and is awaiting payment cycle",
        "6": "Balance due from the subscriber",
        "12": "One or more originally submitted procedure codes have been combined",
        "15": "One or more originally submitted procedure code have been modified",
        "16": "Claim/encounter has been forwarded to entity",
        "17": "Claim/encounter has been forwarded by third party entity to entity",
        "18": "Entity received claim/encounter, but returned invalid status",
        "19": "Entity acknowledges receipt of claim/encounter",
        "20": "Accepted for processing",
        "21": "Missing or invalid information",
        "23": "Returned to Entity",
        "24": "Entity not approved as an electronic submitter",
        "25": "Entity not approved",
        "26": "Entity not found",
        "27": "Policy canceled",
        "29": "Subscriber and policy number/contract number mismatched",
        "30": "Subscriber and subscriber id mismatched",
        "31": "Subscriber and policyholder name mismatched",
        "33": "Subscriber and subscriber id not found",
        "35": "Claim/encounter not found",
        "37": "Predetermination is on file, awaiting completion of services",
        "39": "Awaiting next periodic adjudication cycle",
        "40": "Charges for pregnancy deferred until delivery",
        "41": "Waiting for final approval",
        "42": "Special handling required at payer site",
        "43": "Awaiting related charges",
        "44": "Charges pending provider audit",
        "45": "Awaiting benefit determination",
        "46": "Internal review/audit",
        "47": "Internal review/audit - partial payment made",
        "49": "Pending provider accreditation review",
        "50": "Claim waiting for internal provider verification",
        "51": "Investigating occupational illness/accident",
        "52": "Investigating existence of other insurance coverage",
        "53": "Claim being researched for Insured ID/Group Policy Number error",
        "54": "Duplicate of a previously processed claim/line",
        "55": "Claim assigned to an approver/analyst",
        "56": "Awaiting eligibility determination",
        "57": "Pending COBRA information requested",
        "59": "Non-electronic request for information",
        "60": "Electronic request for information",
        "61": "Eligibility for extended benefits",
        "64": "Re-pricing information",
        "65": "Claim/line has been paid",
        "66": "Payment reflects usual and customary charges",
        "72": "Claim contains split payment",
        "73": "Payment made to entity, assignment of benefits not on file",
        "78": "Duplicate of an existing claim/line, awaiting processing",
        "81": "Contract/plan does not cover pre-existing conditions",
        "83": "No coverage for newborns",
        "84": "Service not authorized",
        "85": "Entity not primary",
        "86": "Diagnosis and patient gender mismatch",
        "88": "Entity not eligible for benefits for submitted dates of service",
        "89": "Entity not eligible for dental benefits for submitted dates of service",
        "90": "Entity not eligible for medical benefits for submitted dates of service",
        "91": "Entity not eligible/not approved for dates of service",
        "92": "Entity does not meet dependent or student qualification",
        "93": "Entity is not selected primary care provider",
        "94": "Entity not referred by selected primary care provider",
        "95": "Requested additional information not received",
        "96": "No agreement with entity",
        "97": "Patient eligibility not found with entity",
        "98": "Charges applied to deductible",
        "99": "Pre-treatment review",
        "100": "Pre-certification penalty taken",
        "101": "Claim was processed as adjustment to previous claim",
        "102": "Newborn's charges processed on mother's claim",
        "103": "Claim combined with other claim(s)",
        "104": "Processed according to plan provisions",
        "105": "Claim/line is capitated",
        "106": "This amount is not entity's responsibility",
        "107": "Processed according to contract provisions",
        "109": "Entity not eligible",
        "110": "Claim requires pricing information",
        "111": "At the policyholder's request these claims cannot be submitted electronically",
        "114": "Claim/service should be processed by entity",
        "116": "Claim submitted to incorrect payer",
        "117": "Claim requires signature-on-file indicator",
        "187": "Date(s) of service",
        "188": "Statement From-Through Dates",
        "189": "Facility admission date",
        "397": "Patient's address",
        "562": "Entity's National Provider Identifier (NPI)",
    }
)

# NM101 / STC01-3 entity identifier codes
ENTITY_IDENTIFIER_CODES = _table(
    {
        "03": "Dependent",
        "1P": "Provider",
        "2B": "Third-Party Administrator",
        "36": "Employer",
        "40": "Receiver",
        "41": "Submitter",
        "45": "Drop-off Location",
        "71": "Attending Physician",
        "72": "Operating Physician",
        "73": "Other Physician",
        "74": "Corrected Insured",
        "77": "Service Location",
        "82": "Rendering Provider",
        "85": "Billing Provider",
        "87": "Pay-to Provider",
        "DK": "Ordering Physician",
        "DN": "Referring Provider",
        "FA": "Facility",
        "GP": "Gateway Provider",
        "IL": "Insured or Subscriber",
        "LR": "Legal Representative",
        "P3": "Primary Care Provider",
        "P5": "Plan Sponsor",
        "PE": "Payee",
        "PR": "Payer",
        "PRP": "Primary Payer",
        "QC": "Patient",
        "SEP": "Secondary Payer",
        "TTP": "Tertiary Payer",
        "VN": "Vendor",
        "Y2": "Managed Care Organization",
    }
)

# HL03 hierarchical level codes
HIERARCHICAL_LEVEL_CODES = _table(
    {
        "19": "Provider of Service",
        "20": "Information Source",
        "21": "Information Receiver",
        "22": "Subscriber",
        "23": "Dependent",
        "PT": "Patient",
    }
)

REFERENCE_QUALIFIERS = _table(
    {
        "0B": "State License Number",
        "18": "Plan Number",
        "1C": "Medicare Provider Number",
        "1D": "Medicaid Provider Number",
        "1K": "Payer Claim Control Number",
        "1L": "Group or Policy Number",
        "1W": "Member Identification Number",
        "3H": "Case Number",
        "49": "Family Unit Number",
        "6P": "Group Number",
        "6R": "Provider Control Number",
        "BLT": "Billing Type",
        "CE": "Class of Contract Code",
        "D9": "Claim Number",
        "EA": "Medical Record Identification Number",
        "EI": "Employer's Identification Number",
        "EJ": "Patient Account Number",
        "EV": "Receiver Identification Number",
        "F6": "Health Insurance Claim (HIC) Number",
        "F8": "Original Reference Number",
        "G1": "Prior Authorization Number",
        "HPI": "Centers for Medicare and Medicaid Services National Provider Identifier",
        "IG": "Insurance Policy Number",
        "N6": "Plan Network Identification Number",
        "NQ": "Medicaid Recipient Identification Number",
        "Q4": "Prior Identifier Number",
        "SY": "Social Security Number",
        "TJ": "Federal Taxpayer's Identification Number",
        "XZ": "Pharmacy Prescription Number",
    }
)

DATE_QUALIFIERS = _table(
    {
        "009": "Process",
        "036": "Expiration",
        "050": "Received",
        "096": "Discharge",
        "102": "Issue",
        "150": "Service Period Start",
        "151": "Service Period End",
        "152": "Effective Date of Change",
        "232": "Claim Statement Period Start",
        "233": "Claim Statement Period End",
        "290": "Coordination of Benefits",
        "291": "Plan",
        "292": "Benefit",
        "295": "Primary Care Provider",
        "307": "Eligibility",
        "318": "Added",
        "340": "Consolidated Omnibus Budget Reconciliation Act (COBRA) Begin",
        "341": "Consolidated Omnibus Budget Reconciliation Act (COBRA) End",
        "346": "Plan Begin",
        "347": "Plan End",
        "348": "Benefit Begin",
        "349": "Benefit End",
        "356": "Eligibility Begin",
        "357": "Eligibility End",
        "405": "Production",
        "435": "Admission",
        "472": "Service",
        "636": "Date of Last Update",
    }
)

AMOUNT_QUALIFIERS = _table(
    {
        "AU": "Coverage Amount",
        "B6": "Allowed - Actual",
        "D8": "Discount Amount",
        "DY": "Per Day Limit",
        "F5": "Patient Amount Paid",
        "I": "Interest",
        "KH": "Deduction Amount",
        "T": "Tax",
        "T2": "Total Claim Before Taxes",
        "T3": "Total Submitted Charges",
        "YU": "In Process",
        "YY": "Returned",
        "ZK": "Federal Medicare or Medicaid Payment Mandate - Category 1",
    }
)

# PER communication number qualifiers
COMMUNICATION_QUALIFIERS = _table(
    {
        "ED": "EDI Access Number",
        "EM": "Email",
        "EX": "Telephone Extension",
        "FX": "Fax",
        "TE": "Phone",
        "UR": "Website",
        "WP": "Work Phone",
    }
)

# CAS01 claim adjustment group codes
ADJUSTMENT_GROUP_CODES = _table(
    {
        "CO": "Contractual Obligations",
        "CR": "Corrections and Reversals",
        "OA": "Other Adjustments",
        "PI": "Payer Initiated Reductions",
        "PR": "Patient Responsibility",
    }
)

# Claim adjustment reason codes (CARC)
CLAIM_ADJUSTMENT_REASON_CODES = _table(
    {
        "1": "Deductible Amount",
        "2": "Coinsurance Amount",
        "3": "Co-payment Amount",
        "4": "The procedure code is inconsistent with the modifier used",
        "5": "The procedure code/type of bill is inconsistent with the place of service",
        "6": "The procedure/revenue code is inconsistent with the patient's age",
        "11": "The diagnosis is inconsistent with the procedure",
        "16": "Claim/service lacks information or has submission/billing error(s)",
        "18": "Exact duplicate claim/service",
        "22": "This care may be covered by another payer per coordination of benefits",
        "23": "The impact of prior payer(s) adjudication including payments and/or adjustments",
        "24": "Charges are covered under a capitation agreement/managed care plan",
        "26": "Expenses incurred prior to coverage",
        "27": "Expenses incurred after coverage terminated",
        "29": "The time limit for filing has expired",
        "31": "Patient cannot be identified as our insured",
        "45": "Charge exceeds fee schedule/maximum allowable or contracted/legislated fee arrangement",
        "50": "These are non-covered services because this is not deemed a 'medical necessity' by the payer",
        "96": "Non-covered charge(s)",
        "97": "The benefit for this service is included in the payment/allowance for another service",
        "109": "Claim/service not covered by this payer/contractor",
        "119": "Benefit maximum for this time period or occurrence has been reached",
        "151": "Payment adjusted because the payer deems the information submitted does not support this many/frequency of services",
        "197": "Precertification/authorization/notification/pre-treatment absent",
        "204": "This service/equipment/drug is not covered under the patient's current benefit plan",
        "242": "Services not provided by network/primary care providers",
        "253": "Sequestration - reduction in federal payment",
    }
)

# CLP02 claim status codes
REMITTANCE_CLAIM_STATUS_CODES = _table(
    {
        "1": "Processed as Primary",
        "2": "Processed as Secondary",
        "3": "Processed as Tertiary",
        "4": "Denied",
        "19": "Processed as Primary, Forwarded to Additional Payer(s)",
        "20": "Processed as Secondary, Forwarded to Additional Payer(s)",
        "21": "Processed as Tertiary, Forwarded to Additional Payer(s)",
        "22": "Reversal of Previous Payment",
        "23": "Not Our Claim, Forwarded to Additional Payer(s)",
        "25": "Predetermination Pricing Only - No Payment",
    }
)

# BPR04 payment method codes
PAYMENT_METHOD_CODES = _table(
    {
        "ACH": "Automated Clearing House (ACH)",
        "BOP": "Financial Institution Option",
        "CHK": "Check",
        "FWT": "Federal Reserve Funds/Wire Transfer - Nonrepetitive",
        "NON": "Non-Payment Data",
    }
)

# 999 IK5/AK5 transaction set and AK9 functional group acknowledgment codes
ACKNOWLEDGMENT_CODES = _table(
    {
        "A": "Accepted",
        "E": "Accepted But Errors Were Noted",
        "M": "Rejected, Message Authentication Code (MAC) Failed",
        "P": "Partially Accepted, At Least One Transaction Set Was Rejected",
        "R": "Rejected",
        "W": "Rejected, Assurance Failed Validity Tests",
        "X": "Rejected, Content After Decryption Could Not Be Analyzed",
    }
)

ACCEPTED_ACKNOWLEDGMENT_CODES = frozenset({"A", "E"})

# IK304 segment syntax error codes
SEGMENT_ERROR_CODES = _table(
    {
        "1": "Unrecognized segment ID",
        "2": "Unexpected segment",
        "3": "Required segment missing",
        "4": "Loop occurs over maximum times",
        "5": "Segment exceeds maximum use",
        "6": "Segment not in defined transaction set",
        "7": "Segment not in proper sequence",
        "8": "Segment has data element errors",
        "I4": "Implementation 'Not Used' segment present",
        "I6": "Implementation dependent segment missing",
        "I7": "Implementation loop occurs under minimum times",
        "I8": "Implementation segment below minimum use",
        "I9": "Implementation dependent 'Not Used' segment present",
    }
)

# IK403 element syntax error codes
ELEMENT_ERROR_CODES = _table(
    {
        "1": "Required data element missing",
        "2": "Conditional required data element missing",
        "3": "Too many data elements",
        "4": "Data element too short",
        "5": "Data element too long",
        "6": "Invalid character in data element",
        "7": "Invalid code value",
        "8": "Invalid date",
        "9": "Invalid time",
        "10": "Exclusion condition violated",
        "12": "Too many repetitions",
        "13": "Too many components",
        "I10": "Implementation 'Not Used' data element present",
        "I11": "Implementation too few repetitions",
        "I12": "Implementation pattern match failure",
        "I13": "Implementation dependent 'Not Used' data element present",
        "I6": "Code value not used in implementation",
        "I9": "Implementation dependent data element missing",
    }
)

# IK502+ transaction set syntax error codes
TRANSACTION_SET_ERROR_CODES = _table(
    {
        "1": "Transaction set not supported",
        "2": "Transaction set trailer missing",
        "3": "Transaction set control number in header and trailer do not match",
        "4": "Number of included segments does not match actual count",
        "5": "One or more segments in error",
        "6": "Missing or invalid transaction set identifier",
        "7": "Missing or invalid transaction set control number",
        "23": "Transaction set control number not unique within the functional group",
        "I5": "Implementation one or more segments in error",
        "I6": "Implementation convention not supported",
    }
)
