"""Prompt templates for the code review.

Each template takes the run's version settings and returns Markdown.
The assembler treats the results as opaque text.
"""

from __future__ import annotations

from .config import VersionSettings
from .features import features_matrix, major_minor, php_doc_url, symfony_doc_url

SYSTEM_PROMPT = """You are a senior Symfony and PHP engineer reviewing a merge request.
Review only the changes in the provided git diff.
Respect the target Symfony and PHP versions; never suggest features beyond them.
Be specific: reference files and lines, give actionable fixes.
Write in a professional technical style."""


def review_instructions(versions: VersionSettings, changed_count: int) -> str:
    """Review principles, methodology and criteria for the target versions."""
    sf, php = versions.symfony_version, versions.php_version
    sf_mm, php_mm = major_minor(sf), major_minor(php)

    feature_lines = []
    if sf_mm >= (6, 2):
        feature_lines.append("- **Console Commands**: Use #[AsConsoleCommand] for declarative setup")
        feature_lines.append("- **MapRequestPayload**: Use #[MapRequestPayload] for DTO mapping")
    elif sf_mm >= (5, 4):
        feature_lines.append("- **Console Commands**: Use SymfonyStyle for output, configure via configure()")
    if sf_mm >= (7, 3):
        feature_lines.append("- **DatePoint**: Use Symfony\\Component\\Clock\\DatePoint for datetime")
        feature_lines.append("- **Event Listeners**: Use #[AsEventListener] for event handling")
    if php_mm >= (8, 0):
        feature_lines.append("- **Type Safety**: Use union types, named arguments")
    if php_mm >= (8, 4):
        feature_lines.append("- **Performance**: Use property hooks, new array functions")
    feature_lines.append("- **Twig/JS/CSS**: Ensure version-appropriate practices (if applicable)")
    version_features = "\n".join(feature_lines)

    return f"""## 🚨 **CRITICAL: DOMAIN-DRIVEN, CONTEXT-AWARE ANALYSIS**

**You are conducting a DOMAIN-DRIVEN, CONTEXT-AWARE code review with these MANDATORY principles:**

### 🎯 **ANALYSIS SCOPE**
1. **ONLY REVIEW CHANGES**: Focus exclusively on the git diff
2. **LEVERAGE DOMAIN CONTEXT**: Align with CQRS and DDD patterns (commands, handlers, repositories)
3. **ENSURE INTEGRATION**: Verify seamless integration with existing codebase
4. **VERSION COMPATIBILITY**: Enforce Symfony {sf} and PHP {php} constraints
5. **MULTI-LANGUAGE SUPPORT**: Review PHP, Twig, JavaScript (ES6), CSS/SCSS

### 🔍 **REVIEW METHODOLOGY**
- **Changed Files**: Analyze the {changed_count} changed file(s)
- **CQRS Alignment**: Ensure commands and handlers follow established patterns
- **Performance Focus**: Evaluate resource usage (memory, execution time)
- **Security Posture**: Validate input handling and resource limits
- **Version Checks**: Avoid features beyond Symfony {sf} and PHP {php}

---

## 🚨 **CRITICAL REVIEW CRITERIA**

{features_matrix(versions)}
### 📊 **SEVERITY CLASSIFICATION**
- **🚨 CRITICAL**: Uses features beyond Symfony {sf}/PHP {php}, security risks, or CQRS violations
- **⚠️ MAJOR**: Misses version-appropriate features or integration issues
- **💡 MINOR**: Optimization opportunities within version constraints

### 🔍 **REVIEW AREAS**

#### 1. 🏗️ **CQRS & Architectural Integration** (HIGHEST PRIORITY)
- **Command Patterns**: Align with existing commands
- **Handler Integration**: Ensure commands interact with appropriate handlers
- **Repository Usage**: Verify repository patterns
- **DDD Principles**: Adhere to domain-driven design boundaries

#### 2. 🆕 **Symfony {sf} & PHP {php} Features** (HIGH PRIORITY)
{version_features}

#### 3. 🔒 **Security & Resource Management** (HIGH PRIORITY)
- **Input Validation**: Sanitize command inputs/options
- **Resource Limits**: Avoid unsafe `ini_set` calls
- **Error Handling**: Robust exception management

#### 4. 🔧 **Code Quality** (MEDIUM PRIORITY)
- **SOLID Principles**: Ensure single responsibility, dependency inversion
- **Readability**: Clear variable names, consistent formatting
- **Performance**: Optimize loops, queries, and fixture generation

#### 5. 🧪 **Testing Strategy** (MEDIUM PRIORITY)
- **Unit Tests**: Cover command logic with PHPUnit
- **Integration Tests**: Use KernelTestCase for console command testing
- **Mocking**: Align mocks with existing test patterns
"""


def closing_checklist(versions: VersionSettings) -> str:
    """Mandatory output format, comment structure and analysis boundaries."""
    sf, php = versions.symfony_version, versions.php_version
    sf_url, php_url = symfony_doc_url(sf), php_doc_url(php)

    return f"""## 🎯 **MANDATORY REVIEW FORMAT**

### 🔍 **Executive Summary**
- **CQRS Integration Score**: X/10 (alignment with command patterns)
- **Feature Adoption Score**: X/10 (use of Symfony {sf}/PHP {php} features)
- **Performance Impact Score**: X/10 (resource usage efficiency)
- **Security Posture Score**: X/10 (input validation, resource safety)
- **Overall Assessment**: [Summary of integration, performance, and security]

**Scoring Rubric**:
- 8–10: Excellent integration/feature use
- 5–7: Moderate issues, addressable
- 0–4: Critical flaws requiring immediate attention

### ✅ **Well-Integrated Changes**
- Examples of effective CQRS alignment and feature adoption

### 🚨 **Critical Issues**
- Use of features beyond Symfony {sf}/PHP {php}, CQRS violations, or security risks

### ⚠️ **Missed Opportunities**
- Underutilized version-appropriate features
- Integration or performance improvements

### 💡 **Optimizations**
- Code readability, performance tweaks, test enhancements

---

## 🚨 **DELIVERABLE: GitHub/GitLab-Ready Comments**

**REQUIREMENTS**:
1. Focus on diff changes only
2. Enforce Symfony {sf} and PHP {php} compatibility
3. Reference [Symfony {sf} Docs]({sf_url}) or [PHP {php} Migration]({php_url})
4. Provide actionable, CQRS-aligned solutions

### 📝 **Comment Structure**

#### 🔍 Comment #[NUMBER]
**File**: `path/to/changed/file`
**Line**: [LINE_NUMBER]
**Severity**: 🚨 Critical / ⚠️ Major / 💡 Minor
**Category**: [CQRS|Security|Performance|PHP|Symfony|Testing]
**Version Check**: [Symfony {sf}|PHP {php}]

**Issue**:
[Description of issue, focusing on CQRS, security, or performance]

**Resolution**:
[Actionable solution aligned with project context]

**Estimated Effort**: [Time estimate]
**Risk**: [Low/Medium/High]

---

## 🎯 **ANALYSIS BOUNDARIES**

### ✅ **DO ANALYZE**:
- Changes in the git diff
- CQRS and DDD alignment
- Symfony {sf} and PHP {php} compatibility
- Testing strategy for the changes

### ❌ **DO NOT ANALYZE**:
- Unchanged files
- Global refactoring beyond the diff
"""
